from groupsettle.core.config import settings

async def system_health():
    return {
        "status": "ok"
    }

async def system_info():
    return {
        "app": settings.APP_NAME,
        "base_currency": settings.BASE_CURRENCY,
        "epsilon": str(settings.SETTLEMENT_EPSILON),
        "strict_conservation": settings.STRICT_CONSERVATION,
    }
