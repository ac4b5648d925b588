"""WhatsApp-style transit booking conversation engine."""
