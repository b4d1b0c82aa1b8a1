# address_verification/services/reference_code.py
import secrets

from address_verification.configs import configs

_code_config = configs.get("reference_code", {})

# No 0/O, 1/I so codes can be read out and typed without ambiguity
CODE_ALPHABET = _code_config.get("alphabet", "ABCDEFGHJKLMNPQRSTUVWXYZ23456789")
CODE_LENGTH = int(_code_config.get("length", 8))


def generate_reference_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_reference_code(code: str) -> str:
    return code.strip().upper()
