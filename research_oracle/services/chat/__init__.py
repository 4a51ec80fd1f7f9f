from research_oracle.services.chat.service import ChatService

__all__ = ["ChatService"]
