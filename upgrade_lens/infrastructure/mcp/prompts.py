from mcp.types import Prompt, PromptArgument

from upgrade_lens.application.interfaces.i_descriptor_provider import IPromptProvider


class UpgradeFoundationPrompt(IPromptProvider):
    def describe(self) -> Prompt:
        return Prompt(
            name="upgrade_foundation",
            description=(
                "Establish a baseline (tests, metrics, backups, clean git state) "
                "before planning a framework upgrade."
            ),
            arguments=[
                PromptArgument(
                    name="target_version",
                    description="Framework version being upgraded to",
                    required=False,
                )
            ],
        )


class PatternScanPrompt(IPromptProvider):
    def describe(self) -> Prompt:
        return Prompt(
            name="pattern_scan",
            description=(
                "Scan the project for a knowledge base pattern and draft the code "
                "changes each match needs."
            ),
            arguments=[
                PromptArgument(
                    name="pattern_id",
                    description="Knowledge base pattern identifier",
                    required=True,
                ),
                PromptArgument(
                    name="project_root",
                    description="Project directory to scan",
                    required=False,
                ),
            ],
        )


class PackageUpgradePrompt(IPromptProvider):
    def describe(self) -> Prompt:
        return Prompt(
            name="package_upgrade",
            description=(
                "Upgrade ecosystem packages alongside the framework: first-party "
                "packages first, then one package at a time with tests in between."
            ),
            arguments=[
                PromptArgument(
                    name="target_version",
                    description="Framework version the packages must support",
                    required=False,
                )
            ],
        )
