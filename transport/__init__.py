"""Transport layers for inbound chat-platform webhooks."""
