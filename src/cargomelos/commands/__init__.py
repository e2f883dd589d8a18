"""cargomelos commands."""

from cargomelos.commands.base import CommandContext, SyncCommand
from cargomelos.commands.changed import (
    ChangedCommand,
    ChangedOptions,
    ChangedResult,
    changed_packages,
    handle_changed_command,
)
from cargomelos.commands.list import (
    ListCommand,
    ListOptions,
    ListResult,
    PackageInfo,
    handle_list_command,
    list_packages,
)
from cargomelos.commands.plan import (
    PlanCommand,
    PlanOptions,
    PlanResult,
    RegistryClients,
    handle_plan_command,
    plan,
)
from cargomelos.commands.publish import (
    PackagePublish,
    PublishCommand,
    PublishOptions,
    PublishResult,
    PublishStatus,
    handle_publish_command,
    publish,
)
from cargomelos.commands.rename import (
    RenameCommand,
    RenameOptions,
    RenameResult,
    handle_rename_command,
    rename,
)
from cargomelos.commands.version import (
    VersionCommand,
    VersionOptions,
    VersionResult,
    flag_decider,
    handle_version_command,
    prompt_confirmer,
    prompt_decider,
    version,
)

__all__ = [
    # Base
    "SyncCommand",
    "CommandContext",
    # List
    "ListCommand",
    "ListOptions",
    "ListResult",
    "PackageInfo",
    "list_packages",
    "handle_list_command",
    # Changed
    "ChangedCommand",
    "ChangedOptions",
    "ChangedResult",
    "changed_packages",
    "handle_changed_command",
    # Plan
    "PlanCommand",
    "PlanOptions",
    "PlanResult",
    "RegistryClients",
    "plan",
    "handle_plan_command",
    # Version
    "VersionCommand",
    "VersionOptions",
    "VersionResult",
    "flag_decider",
    "prompt_decider",
    "prompt_confirmer",
    "version",
    "handle_version_command",
    # Publish
    "PackagePublish",
    "PublishCommand",
    "PublishOptions",
    "PublishResult",
    "PublishStatus",
    "publish",
    "handle_publish_command",
    # Rename
    "RenameCommand",
    "RenameOptions",
    "RenameResult",
    "rename",
    "handle_rename_command",
]
