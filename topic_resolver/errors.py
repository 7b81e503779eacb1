# errors.py – Error types raised while resolving topic names and Kafka config
from typing import Optional


class TopicResolverError(Exception):
    """Base class for resolver errors"""


class TemplateRenderError(TopicResolverError):
    """A topic template is missing from the store or cannot be rendered"""

    def __init__(self, message: str, template_name: Optional[str] = None):
        super().__init__(message)
        self.template_name = template_name


class ConfigNotFoundError(TopicResolverError):
    """No config leaf exists for a flow/functionality/action path"""

    def __init__(self, flow, functionality, action):
        super().__init__(
            f"No config found for flow='{_plain(flow)}', "
            f"functionality='{_plain(functionality)}', action='{_plain(action)}'"
        )
        self.flow = flow
        self.functionality = functionality
        self.action = action


class ConfigFileError(TopicResolverError):
    """The Kafka configuration file is missing or invalid"""


def _plain(value) -> str:
    # Enum members render as their value, not "Flow.PRODUCER"
    return str(getattr(value, "value", value))
