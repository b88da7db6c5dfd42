"""
Request schemas for the report endpoints.
"""
import base64
import binascii
import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from visitreport.core.exceptions import ReportValidationError
from visitreport.services.delivery.email import Attachment
from visitreport.services.visits.models import VisitRecord

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

TEXT_ENCODINGS = {"utf8": "utf-8", "utf-8": "utf-8", "latin1": "latin-1", "binary": "latin-1", "ascii": "ascii"}


class SendMethod(str, Enum):
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    CHAT = "chat"  # alias of whatsapp
    BOTH = "both"

    @property
    def includes_email(self) -> bool:
        return self in (SendMethod.EMAIL, SendMethod.BOTH)

    @property
    def includes_chat(self) -> bool:
        return self in (SendMethod.WHATSAPP, SendMethod.CHAT, SendMethod.BOTH)


class AttachmentIn(BaseModel):
    """Attachment sent by the portal, content encoded as text."""
    filename: str
    content: str
    encoding: Optional[str] = "base64"

    def decode(self) -> Attachment:
        encoding = (self.encoding or "base64").lower()
        try:
            if encoding == "base64":
                content = base64.b64decode(self.content, validate=True)
            elif encoding == "hex":
                content = bytes.fromhex(self.content)
            elif encoding in TEXT_ENCODINGS:
                content = self.content.encode(TEXT_ENCODINGS[encoding])
            else:
                raise ReportValidationError(f"Unsupported attachment encoding: {self.encoding}")
        except (binascii.Error, ValueError) as e:
            raise ReportValidationError(f"Attachment {self.filename} could not be decoded") from e
        return Attachment(filename=self.filename, content=content)


class SendReportRequest(BaseModel):
    """Body of POST /send-report."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    send_method: SendMethod = SendMethod.EMAIL
    to: Optional[str] = None
    whatsapp_number: Optional[str] = Field(default=None, description="Chat destination")
    subject: Optional[str] = None
    html: Optional[str] = None
    visits: List[VisitRecord] = Field(default_factory=list)
    fetch_from_store: bool = Field(default=False, description="Read visits from the store instead of the body")
    attach_spreadsheet: bool = Field(default=False, description="Attach a generated .xlsx")
    attachments: List[AttachmentIn] = Field(default_factory=list)

    def validate_destinations(self) -> None:
        """Check every selected channel's destination before anything is sent."""
        if self.send_method.includes_email:
            if not self.to or not self.to.strip():
                raise ReportValidationError("Email recipient is required")
            if not EMAIL_PATTERN.match(self.to.strip()):
                raise ReportValidationError("Invalid email format")

        if self.send_method.includes_chat:
            if not self.whatsapp_number or not self.whatsapp_number.strip():
                raise ReportValidationError("WhatsApp number is required")

    def decoded_attachments(self) -> List[Attachment]:
        return [attachment.decode() for attachment in self.attachments]
