import logging
from django.http import JsonResponse
from django.db import connection
from django.db.utils import DatabaseError

logger = logging.getLogger(__name__)


def health_check(request):
    status = {"db": "unknown"}
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        status["db"] = "ok"
        return JsonResponse({"status": "ok", "components": status}, status=200)
    except DatabaseError as e:
        logger.error(f"Health check failed: {e}")
        status["db"] = "error"
        return JsonResponse(
            {"status": "error", "components": status},
            status=503
        )
