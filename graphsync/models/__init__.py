"""Domain model exports."""

from .credential import Credential
from .lists import RawItem, ResourceIdentity

__all__ = ["Credential", "RawItem", "ResourceIdentity"]
