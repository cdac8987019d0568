import re
from rest_framework import serializers


def normalize_cpf(value):
    """Strip mask characters ('.', '-', spaces) from a CPF."""
    return re.sub(r"[^\d]", "", str(value or ""))


def _cpf_check_digit(digits, weight_start):
    total = sum(int(d) * w for d, w in zip(digits, range(weight_start, 1, -1)))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def is_valid_cpf(value):
    cpf = normalize_cpf(value)

    if len(cpf) != 11:
        return False

    # 000.000.000-00, 111.111.111-11 ... pass the checksum but are not issued
    if len(set(cpf)) == 1:
        return False

    if _cpf_check_digit(cpf[:9], 10) != int(cpf[9]):
        return False
    return _cpf_check_digit(cpf[:10], 11) == int(cpf[10])


def validate_cpf(value):
    if not is_valid_cpf(value):
        raise serializers.ValidationError("Invalid CPF.")
    return normalize_cpf(value)
