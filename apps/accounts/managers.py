from django.contrib.auth.base_user import BaseUserManager

from apps.utils.validators import normalize_cpf


class UserManager(BaseUserManager):
    use_in_migrations = True

    def get_by_cpf(self, cpf):
        return self.filter(cpf=normalize_cpf(cpf)).first()

    def _create_user(self, cpf, password=None, **extra_fields):
        cpf = normalize_cpf(cpf)
        if not cpf:
            raise ValueError("The cpf field must be set")

        user = self.model(cpf=cpf, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_user(self, cpf, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(cpf, password, **extra_fields)

    def create_superuser(self, cpf, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(cpf, password, **extra_fields)
