"""FastAPI dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from glucos.services.monitor import PatientMonitor


def get_monitor(request: Request) -> PatientMonitor:
    """Return the patient monitor attached to the application.

    Raises:
        HTTPException: 503 if the application has not finished starting
    """
    monitor = getattr(request.app.state, "monitor", None)
    if monitor is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Patient monitor is not initialized",
        )
    return monitor


# Type alias for cleaner route signatures
Monitor = Annotated[PatientMonitor, Depends(get_monitor)]
