import pytest

from scribe.models import Message
from scribe.services.message_service import MessageService
from scribe.services.notification_service import NotificationService


@pytest.mark.django_db
def test_inbox_counts_unread_admin_messages(user_client, user):
    MessageService.send(user, "Hello", "From admin", from_admin=True)
    MessageService.send(user, "Re: Hello", "From user", from_admin=False)

    response = user_client.get("/api/messages/")

    assert response.status_code == 200
    assert len(response.data["messages"]) == 2
    assert response.data["unread"] == 1


@pytest.mark.django_db
def test_reply_and_mark_read(user_client, user):
    response = user_client.post("/api/messages/reply/", {"subject": "Question", "content": "When?"}, format="json")
    assert response.status_code == 201
    assert response.data["from_admin"] is False

    response = user_client.post("/api/messages/reply/", {"subject": "", "content": "x"}, format="json")
    assert response.status_code == 400

    message = MessageService.send(user, "Notice", "Maintenance tonight", from_admin=True)
    response = user_client.post(f"/api/messages/{message.message_id}/read/")
    assert response.status_code == 200
    assert Message.objects.get(pk=message.pk).read is True


@pytest.mark.django_db
def test_cannot_read_someone_elses_message(client_for, make_user, user):
    message = MessageService.send(user, "Private", "Only for Dana", from_admin=True)
    other = make_user(email="other@example.com")

    response = client_for(other).post(f"/api/messages/{message.message_id}/read/")

    assert response.status_code == 404


@pytest.mark.django_db
def test_notifications(user_client, user):
    first = NotificationService.notify(user, "payment", "Payment Successful", "$10.00")
    NotificationService.notify(user, "credits", "Credits Added", "60 credits")

    response = user_client.post(f"/api/notifications/{first.notification_id}/read/")
    assert response.status_code == 200

    response = user_client.get("/api/notifications/?unread=true")
    assert [n["title"] for n in response.data["notifications"]] == ["Credits Added"]

    response = user_client.post("/api/notifications/read-all/")
    assert response.data["updated"] == 1

    response = user_client.get("/api/notifications/?unread=true")
    assert response.data["notifications"] == []
