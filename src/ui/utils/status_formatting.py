from models.schemas import BrandStatus

_STATUS_ICONS = {
    BrandStatus.APROBADA: "🟢",
    BrandStatus.PENDIENTE: "🟡",
    BrandStatus.RECHAZADA: "🔴",
}


def status_icon(status: BrandStatus | str | None) -> str:
    try:
        return _STATUS_ICONS[BrandStatus(status)]
    except ValueError:
        return "⚪"


def status_label(status: BrandStatus | str | None) -> str:
    if status is None:
        return f"{status_icon(None)} unknown"
    value = status.value if isinstance(status, BrandStatus) else str(status)
    return f"{status_icon(status)} {value}"


def owner_initial(name: str) -> str:
    name = (name or "").strip()
    return name[:1].upper() if name else "?"
