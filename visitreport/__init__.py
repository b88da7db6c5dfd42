"""Site visit report bridge: scheduled and on-demand email/WhatsApp visit reports."""

__version__ = "1.0.0"
