"""FastAPI dependency utilities."""

from fastapi import Header, HTTPException, status


def resolve_owner(raw_owner: str | None) -> str:
    """Return the trimmed owner identifier or raise ``401``."""

    owner = (raw_owner or "").strip()
    if not owner:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing owner identity",
        )
    return owner


def get_current_owner(x_owner_id: str | None = Header(default=None)) -> str:
    """Return the owner resolved by the upstream authentication layer."""

    return resolve_owner(x_owner_id)
