"""WhatsApp bot answering order-tracking and catalog questions."""

__version__ = "0.1.0"
