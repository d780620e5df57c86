"""
provisioner.py: submits a node's manifests to the substrate
"""
import logging
from .backends.base import SubstrateBackend
from .errors import SubstrateCommandError, SubmissionError
from .manifest import render_node_manifest
from .models import BuildPlan

logger = logging.getLogger(__name__)


class ResourceProvisioner:
    """
    ResourceProvisioner: creates the resources of one node. Acceptance of the
    request is all create() confirms, readiness is the poller's job.
    """

    def __init__(self, backend: SubstrateBackend, render=render_node_manifest):
        self.backend = backend
        self.render = render

    def create(self, plan: BuildPlan) -> None:
        descriptor = self.render(plan)
        logger.debug(f"manifest for node {plan.name}:\n{descriptor}")
        try:
            self.backend.apply(descriptor)
        except SubstrateCommandError as e:
            raise SubmissionError(plan.name, e) from e
        logger.info(f"Submitted node {plan.name}")
