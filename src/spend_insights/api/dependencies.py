from fastapi import HTTPException, Request

from spend_insights.manager import SpendingSession


def get_session(request: Request) -> SpendingSession:
    session = getattr(request.app.state, "session", None)
    if not session:
        raise HTTPException(status_code=500, detail="Session not initialized")
    return session
