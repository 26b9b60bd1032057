from typing import Optional

from api.backend import AssistantBackend

# Global instance initialized at startup
backend: Optional[AssistantBackend] = None
