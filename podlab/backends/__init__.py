from .base import SubstrateBackend
from .kubectl import KubectlBackend

__all__ = ['SubstrateBackend', 'KubectlBackend']
