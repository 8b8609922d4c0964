"""SMS message text."""

OTP_TEMPLATE = "Your {app_name} OTP is {code}. Valid for {minutes} minutes. Do not share this code."


def otp_message(code: str, app_name: str = "Spendly", expiry_seconds: int = 300) -> str:
    minutes = max(expiry_seconds // 60, 1)
    return OTP_TEMPLATE.format(app_name=app_name, code=code, minutes=minutes)
