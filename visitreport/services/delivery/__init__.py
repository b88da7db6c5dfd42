"""
Delivery channels: email (SMTP) and WhatsApp (Twilio)
"""
from visitreport.services.delivery.email import Attachment, EmailSender, SMTPMailTransport
from visitreport.services.delivery.whatsapp import TwilioClient, WhatsAppSender

__all__ = [
    "Attachment",
    "EmailSender",
    "SMTPMailTransport",
    "TwilioClient",
    "WhatsAppSender",
]
