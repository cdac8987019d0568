# apps/utils/serializers.py
from rest_framework import serializers


class ServerInfoSerializer(serializers.Serializer):
    """
    Used by ServerInfoView.
    """
    app_name = serializers.CharField()
    version = serializers.CharField()
    debug = serializers.BooleanField()


class MessageSerializer(serializers.Serializer):
    """
    Plain {"message": ...} acknowledgements.
    """
    message = serializers.CharField()
