"""Share payloads for a finished card (SMS and e-mail links, native share data)."""

from urllib.parse import quote

from pydantic import BaseModel

EMAIL_SUBJECT = "Happy Father's Day from your child!"


class SharePayload(BaseModel):
    message: str
    sms_url: str
    email_url: str
    native_title: str
    native_text: str
    url: str


def share_message(card_title: str, dad_name: str, url: str) -> str:
    return f"Happy Father's Day! I created a special {card_title} for {dad_name}. Check it out: {url}"


def share_payload(url: str, card_title: str = "Father's Day Card", dad_name: str = "Dad") -> SharePayload:
    message = share_message(card_title, dad_name, url)
    return SharePayload(
        message=message,
        sms_url=f"sms:?body={quote(message, safe='')}",
        email_url=f"mailto:?subject={quote(EMAIL_SUBJECT, safe='')}&body={quote(message, safe='')}",
        native_title=f"Father's Day Card for {dad_name}",
        native_text=f"Happy Father's Day! I created a special card for {dad_name}.",
        url=url,
    )
