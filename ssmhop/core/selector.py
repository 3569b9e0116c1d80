"""Interactive choice of region and target instance."""

from __future__ import annotations

import logging

from ssmhop.core.exceptions import NoSelectionMade
from ssmhop.providers.aws.constants import DEFAULT_REGIONS
from ssmhop.providers.aws.directory import InstanceDirectory
from ssmhop.providers.exceptions import ProviderError
from ssmhop.tui.prompt import SelectPrompt

logger = logging.getLogger(__name__)

REGION_PROMPT = "Choose a region in AWS:"
TARGET_PROMPT = "Choose a target in AWS:"


def format_target_label(name: str, instance_id: str) -> str:
    """Build the display label for an instance."""
    return f"{name}\t({instance_id})"


class InteractiveSelector:
    """Ask the user for a region or a running instance.

    Parameters
    ----------
    directory : InstanceDirectory
        Inventory used to build the option lists
    prompt : SelectPrompt
        Prompt surface presenting the options
    """

    def __init__(self, directory: InstanceDirectory, prompt: SelectPrompt) -> None:
        self.directory = directory
        self.prompt = prompt

    def select_region(self) -> str:
        """Prompt for a region.

        Falls back to the built-in region list when regions cannot be
        enumerated.

        Returns
        -------
        str
            Chosen region

        Raises
        ------
        NoSelectionMade
            If the user aborts the prompt
        """
        try:
            regions = self.directory.list_regions()
        except ProviderError as e:
            logger.debug("Falling back to built-in region list: %s", e)
            regions = list(DEFAULT_REGIONS)

        if not regions:
            regions = list(DEFAULT_REGIONS)

        choice = self.prompt.select(REGION_PROMPT, sorted(set(regions)))
        if choice is None:
            raise NoSelectionMade("no region selected")

        return choice

    def select_target(self, region: str) -> str:
        """Prompt for a running instance in a region.

        Labels embed the instance id, so two entries can only share a label
        when they describe the same instance.

        Parameters
        ----------
        region : str
            Region to list instances from

        Returns
        -------
        str
            Chosen instance id, or "" when the region has no running
            instances (the prompt is not shown in that case)

        Raises
        ------
        NoSelectionMade
            If the user aborts the prompt
        LookupFailed
            If the instance list cannot be retrieved
        """
        table: dict[str, str] = {}
        for instance in self.directory.list_running_instances(region):
            label = format_target_label(instance["name"], instance["instance_id"])
            table[label] = instance["instance_id"]

        if not table:
            return ""

        choice = self.prompt.select(TARGET_PROMPT, sorted(table))
        if choice is None:
            raise NoSelectionMade("no target selected")

        return table[choice]
