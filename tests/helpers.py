"""Shared test helpers."""

from httpx import AsyncClient

from welltrack.services.notification_service import Notification, NotificationSender

PASSWORD = "correct-horse-battery"


class CapturingSender(NotificationSender):
    """Keeps sent notifications in memory."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, Notification]] = []

    async def send(self, to: str, notification: Notification) -> None:
        self.sent.append((to, notification))


async def register(client: AsyncClient, email: str = "alex@example.com", **extra) -> dict:
    response = await client.post(
        "/api/auth/register",
        json={"email": email, "password": PASSWORD, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


def bearer(auth: dict) -> dict:
    return {"Authorization": f"Bearer {auth['accessToken']}"}
