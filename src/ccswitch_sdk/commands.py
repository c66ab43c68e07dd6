"""Typed commands and their HTTP routing.

Every command the desktop application understands is a pydantic model whose
``command`` literal is the discriminator of the closed ``Command`` union.
Each variant knows its own endpoint, so resolving a command never consults a
lookup table and adding a command means adding a variant.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ccswitch_sdk.errors import UnsupportedCommandError, ValidationError

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "HEAD"]

IDEMPOTENT_METHODS: tuple[str, ...] = ("GET", "HEAD")


@dataclass(frozen=True)
class CommandDescriptor:
    method: HttpMethod
    path: str
    body: Any = None

    @property
    def is_read(self) -> bool:
        return self.method in IDEMPOTENT_METHODS


def _encode(value: object) -> str:
    # Same unreserved set as encodeURIComponent so paths match the browser client.
    return quote(str(value), safe="!~*'()")


def _missing(field_name: str, command: str) -> ValidationError:
    return ValidationError(f'Missing argument "{field_name}" for command "{command}"')


class BaseCommand(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        coerce_numbers_to_str=True,
    )

    command: str

    def endpoint(self) -> CommandDescriptor:
        raise NotImplementedError(f"{type(self).__name__} has no HTTP endpoint")

    def to_args(self) -> dict[str, Any]:
        """Argument bag in the wire (camelCase) shape, as the native bridge expects it."""
        return self.model_dump(by_alias=True, exclude={"command"}, exclude_none=True)


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class GetProviders(BaseCommand):
    command: Literal["get_providers"] = "get_providers"
    app: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", f"/providers/{_encode(self.app)}")


class GetCurrentProvider(BaseCommand):
    command: Literal["get_current_provider"] = "get_current_provider"
    app: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", f"/providers/{_encode(self.app)}/current")


class GetBackupProvider(BaseCommand):
    command: Literal["get_backup_provider"] = "get_backup_provider"
    app: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", f"/providers/{_encode(self.app)}/backup")


class SetBackupProvider(BaseCommand):
    command: Literal["set_backup_provider"] = "set_backup_provider"
    app: str
    id: Optional[str] = None

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("PUT", f"/providers/{_encode(self.app)}/backup", {"id": self.id})


class AddProvider(BaseCommand):
    command: Literal["add_provider"] = "add_provider"
    app: str
    provider: Dict[str, Any]

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", f"/providers/{_encode(self.app)}", self.provider)


class UpdateProvider(BaseCommand):
    command: Literal["update_provider"] = "update_provider"
    app: str
    provider: Dict[str, Any]
    id: Optional[str] = None

    def provider_id(self) -> object:
        for candidate in (self.provider.get("id"), self.provider.get("providerId"), self.id):
            if candidate not in (None, ""):
                return candidate
        return None

    def endpoint(self) -> CommandDescriptor:
        provider_id = self.provider_id()
        if provider_id is None:
            raise ValidationError(f'Missing provider id for command "{self.command}"')
        return CommandDescriptor(
            "PUT",
            f"/providers/{_encode(self.app)}/{_encode(provider_id)}",
            self.provider,
        )


class DeleteProvider(BaseCommand):
    command: Literal["delete_provider"] = "delete_provider"
    app: str
    id: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("DELETE", f"/providers/{_encode(self.app)}/{_encode(self.id)}")


class SwitchProvider(BaseCommand):
    command: Literal["switch_provider"] = "switch_provider"
    app: str
    id: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor(
            "POST", f"/providers/{_encode(self.app)}/{_encode(self.id)}/switch"
        )


class ImportDefaultConfig(BaseCommand):
    command: Literal["import_default_config"] = "import_default_config"
    app: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", f"/providers/{_encode(self.app)}/import-default")


class ReadLiveProviderSettings(BaseCommand):
    command: Literal["read_live_provider_settings"] = "read_live_provider_settings"
    app: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", f"/providers/{_encode(self.app)}/live-settings")


class UpdateTrayMenu(BaseCommand):
    command: Literal["update_tray_menu"] = "update_tray_menu"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/tray/update")


class UpdateProvidersSortOrder(BaseCommand):
    command: Literal["update_providers_sort_order"] = "update_providers_sort_order"
    app: str
    updates: List[Any]

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor(
            "PUT", f"/providers/{_encode(self.app)}/sort-order", {"updates": self.updates}
        )


class QueryProviderUsage(BaseCommand):
    command: Literal["queryProviderUsage"] = "queryProviderUsage"
    app: str
    provider_id: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor(
            "POST", f"/providers/{_encode(self.app)}/{_encode(self.provider_id)}/usage"
        )


class TestUsageScript(BaseCommand):
    __test__ = False

    command: Literal["testUsageScript"] = "testUsageScript"
    app: str
    provider_id: str
    script_code: str
    timeout: Optional[Any] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    access_token: Optional[str] = None
    user_id: Optional[str] = None

    def endpoint(self) -> CommandDescriptor:
        body = self.model_dump(
            by_alias=True,
            exclude_none=True,
            include={"script_code", "timeout", "api_key", "base_url", "access_token", "user_id"},
        )
        return CommandDescriptor(
            "POST",
            f"/providers/{_encode(self.app)}/{_encode(self.provider_id)}/usage/test",
            body,
        )


class SyncCurrentProvidersLive(BaseCommand):
    command: Literal["sync_current_providers_live"] = "sync_current_providers_live"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/providers/sync-current")


# ---------------------------------------------------------------------------
# MCP servers
# ---------------------------------------------------------------------------


class GetClaudeMcpStatus(BaseCommand):
    command: Literal["get_claude_mcp_status"] = "get_claude_mcp_status"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", "/mcp/status")


class ReadClaudeMcpConfig(BaseCommand):
    command: Literal["read_claude_mcp_config"] = "read_claude_mcp_config"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", "/mcp/config/claude")


class UpsertClaudeMcpServer(BaseCommand):
    command: Literal["upsert_claude_mcp_server"] = "upsert_claude_mcp_server"
    id: str
    spec: Dict[str, Any]

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor(
            "PUT", f"/mcp/config/claude/servers/{_encode(self.id)}", {"spec": self.spec}
        )


class DeleteClaudeMcpServer(BaseCommand):
    command: Literal["delete_claude_mcp_server"] = "delete_claude_mcp_server"
    id: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("DELETE", f"/mcp/config/claude/servers/{_encode(self.id)}")


class ValidateMcpCommand(BaseCommand):
    command: Literal["validate_mcp_command"] = "validate_mcp_command"
    cmd: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/mcp/validate", {"cmd": self.cmd})


class GetMcpConfig(BaseCommand):
    command: Literal["get_mcp_config"] = "get_mcp_config"
    app: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", f"/mcp/config/{_encode(self.app)}")


class UpsertMcpServerInConfig(BaseCommand):
    command: Literal["upsert_mcp_server_in_config"] = "upsert_mcp_server_in_config"
    app: str
    id: str
    spec: Dict[str, Any]
    sync_other_side: Optional[bool] = None

    def endpoint(self) -> CommandDescriptor:
        body: dict[str, Any] = {"spec": self.spec}
        if self.sync_other_side is not None:
            body["syncOtherSide"] = self.sync_other_side
        return CommandDescriptor(
            "PUT", f"/mcp/config/{_encode(self.app)}/servers/{_encode(self.id)}", body
        )


class DeleteMcpServerInConfig(BaseCommand):
    command: Literal["delete_mcp_server_in_config"] = "delete_mcp_server_in_config"
    app: str
    id: str
    sync_other_side: Optional[bool] = None

    def endpoint(self) -> CommandDescriptor:
        body = {"syncOtherSide": self.sync_other_side} if self.sync_other_side is not None else None
        return CommandDescriptor(
            "DELETE", f"/mcp/config/{_encode(self.app)}/servers/{_encode(self.id)}", body
        )


class SetMcpEnabled(BaseCommand):
    command: Literal["set_mcp_enabled"] = "set_mcp_enabled"
    app: str
    id: str
    enabled: bool

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor(
            "POST",
            f"/mcp/config/{_encode(self.app)}/servers/{_encode(self.id)}/enabled",
            {"enabled": self.enabled},
        )


class GetMcpServers(BaseCommand):
    command: Literal["get_mcp_servers"] = "get_mcp_servers"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", "/mcp/servers")


class UpsertMcpServer(BaseCommand):
    command: Literal["upsert_mcp_server"] = "upsert_mcp_server"
    server: Dict[str, Any]

    def endpoint(self) -> CommandDescriptor:
        server_id = self.server.get("id")
        if server_id is None:
            raise _missing("id", self.command)
        return CommandDescriptor("PUT", f"/mcp/servers/{_encode(server_id)}", self.server)


class DeleteMcpServer(BaseCommand):
    command: Literal["delete_mcp_server"] = "delete_mcp_server"
    id: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("DELETE", f"/mcp/servers/{_encode(self.id)}")


class ToggleMcpApp(BaseCommand):
    command: Literal["toggle_mcp_app"] = "toggle_mcp_app"
    server_id: str
    app: str
    enabled: bool

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor(
            "POST",
            f"/mcp/servers/{_encode(self.server_id)}/apps/{_encode(self.app)}",
            {"enabled": self.enabled},
        )


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


class GetPrompts(BaseCommand):
    command: Literal["get_prompts"] = "get_prompts"
    app: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", f"/prompts/{_encode(self.app)}")


class UpsertPrompt(BaseCommand):
    command: Literal["upsert_prompt"] = "upsert_prompt"
    app: str
    id: str
    prompt: Dict[str, Any]

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor(
            "PUT", f"/prompts/{_encode(self.app)}/{_encode(self.id)}", self.prompt
        )


class DeletePrompt(BaseCommand):
    command: Literal["delete_prompt"] = "delete_prompt"
    app: str
    id: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("DELETE", f"/prompts/{_encode(self.app)}/{_encode(self.id)}")


class EnablePrompt(BaseCommand):
    command: Literal["enable_prompt"] = "enable_prompt"
    app: str
    id: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor(
            "POST", f"/prompts/{_encode(self.app)}/{_encode(self.id)}/enable"
        )


class ImportPromptFromFile(BaseCommand):
    command: Literal["import_prompt_from_file"] = "import_prompt_from_file"
    app: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", f"/prompts/{_encode(self.app)}/import-from-file")


class GetCurrentPromptFileContent(BaseCommand):
    command: Literal["get_current_prompt_file_content"] = "get_current_prompt_file_content"
    app: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", f"/prompts/{_encode(self.app)}/current-file")


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------


class GetSkills(BaseCommand):
    command: Literal["get_skills"] = "get_skills"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", "/skills")


class InstallSkill(BaseCommand):
    command: Literal["install_skill"] = "install_skill"
    directory: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/skills/install", {"directory": self.directory})


class UninstallSkill(BaseCommand):
    command: Literal["uninstall_skill"] = "uninstall_skill"
    directory: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/skills/uninstall", {"directory": self.directory})


class GetSkillRepos(BaseCommand):
    command: Literal["get_skill_repos"] = "get_skill_repos"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", "/skills/repos")


class AddSkillRepo(BaseCommand):
    command: Literal["add_skill_repo"] = "add_skill_repo"
    repo: Dict[str, Any]

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/skills/repos", self.repo)


class RemoveSkillRepo(BaseCommand):
    command: Literal["remove_skill_repo"] = "remove_skill_repo"
    owner: str
    name: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor(
            "DELETE", f"/skills/repos/{_encode(self.owner)}/{_encode(self.name)}"
        )


# ---------------------------------------------------------------------------
# Settings, config and system
# ---------------------------------------------------------------------------


class GetSettings(BaseCommand):
    command: Literal["get_settings"] = "get_settings"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", "/settings")


class SaveSettings(BaseCommand):
    command: Literal["save_settings"] = "save_settings"
    settings: Dict[str, Any]

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("PUT", "/settings", self.settings)


class RestartApp(BaseCommand):
    command: Literal["restart_app"] = "restart_app"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/system/restart")


class CheckForUpdates(BaseCommand):
    command: Literal["check_for_updates"] = "check_for_updates"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/system/check-updates")


class IsPortableMode(BaseCommand):
    command: Literal["is_portable_mode"] = "is_portable_mode"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", "/system/is-portable")


class GetConfigDir(BaseCommand):
    command: Literal["get_config_dir"] = "get_config_dir"
    app: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", f"/config/{_encode(self.app)}/dir")


class OpenConfigFolder(BaseCommand):
    command: Literal["open_config_folder"] = "open_config_folder"
    app: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", f"/config/{_encode(self.app)}/open")


class PickDirectory(BaseCommand):
    command: Literal["pick_directory"] = "pick_directory"
    default_path: Optional[str] = None

    def endpoint(self) -> CommandDescriptor:
        body = {"defaultPath": self.default_path} if self.default_path is not None else None
        return CommandDescriptor("POST", "/fs/pick-directory", body)


class GetClaudeCodeConfigPath(BaseCommand):
    command: Literal["get_claude_code_config_path"] = "get_claude_code_config_path"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", "/config/claude-code/path")


class GetAppConfigPath(BaseCommand):
    command: Literal["get_app_config_path"] = "get_app_config_path"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", "/config/app/path")


class OpenAppConfigFolder(BaseCommand):
    command: Literal["open_app_config_folder"] = "open_app_config_folder"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/config/app/open")


class GetAppConfigDirOverride(BaseCommand):
    command: Literal["get_app_config_dir_override"] = "get_app_config_dir_override"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", "/config/app/override")


class SetAppConfigDirOverride(BaseCommand):
    command: Literal["set_app_config_dir_override"] = "set_app_config_dir_override"
    path: Optional[str] = None

    def endpoint(self) -> CommandDescriptor:
        body = {"path": self.path} if self.path is not None else {}
        return CommandDescriptor("PUT", "/config/app/override", body)


class ApplyClaudePluginConfig(BaseCommand):
    command: Literal["apply_claude_plugin_config"] = "apply_claude_plugin_config"
    official: bool

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/config/claude/plugin", {"official": self.official})


class SaveFileDialog(BaseCommand):
    command: Literal["save_file_dialog"] = "save_file_dialog"
    default_name: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/fs/save-file", {"defaultName": self.default_name})


class OpenFileDialog(BaseCommand):
    command: Literal["open_file_dialog"] = "open_file_dialog"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/fs/open-file")


class ExportConfigToFile(BaseCommand):
    command: Literal["export_config_to_file"] = "export_config_to_file"
    file_path: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/config/export", {"filePath": self.file_path})


class ImportConfigFromFile(BaseCommand):
    command: Literal["import_config_from_file"] = "import_config_from_file"
    file_path: str
    # The server cannot read the caller's filesystem, so the file body travels inline.
    content: Optional[str] = None

    def endpoint(self) -> CommandDescriptor:
        body = {"filePath": self.file_path}
        if self.content is not None:
            body["content"] = self.content
        return CommandDescriptor("POST", "/config/import", body)


class OpenExternal(BaseCommand):
    command: Literal["open_external"] = "open_external"
    url: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("POST", "/system/open-external", {"url": self.url})


class GetClaudeCommonConfigSnippet(BaseCommand):
    command: Literal["get_claude_common_config_snippet"] = "get_claude_common_config_snippet"

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", "/config/claude/common-snippet")


class SetClaudeCommonConfigSnippet(BaseCommand):
    command: Literal["set_claude_common_config_snippet"] = "set_claude_common_config_snippet"
    snippet: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("PUT", "/config/claude/common-snippet", {"snippet": self.snippet})


class GetCommonConfigSnippet(BaseCommand):
    command: Literal["get_common_config_snippet"] = "get_common_config_snippet"
    app_type: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor("GET", f"/config/{_encode(self.app_type)}/common-snippet")


class SetCommonConfigSnippet(BaseCommand):
    command: Literal["set_common_config_snippet"] = "set_common_config_snippet"
    app_type: str
    snippet: str

    def endpoint(self) -> CommandDescriptor:
        return CommandDescriptor(
            "PUT", f"/config/{_encode(self.app_type)}/common-snippet", {"snippet": self.snippet}
        )


_VARIANTS = (
    GetProviders,
    GetCurrentProvider,
    GetBackupProvider,
    SetBackupProvider,
    AddProvider,
    UpdateProvider,
    DeleteProvider,
    SwitchProvider,
    ImportDefaultConfig,
    ReadLiveProviderSettings,
    UpdateTrayMenu,
    UpdateProvidersSortOrder,
    QueryProviderUsage,
    TestUsageScript,
    SyncCurrentProvidersLive,
    GetClaudeMcpStatus,
    ReadClaudeMcpConfig,
    UpsertClaudeMcpServer,
    DeleteClaudeMcpServer,
    ValidateMcpCommand,
    GetMcpConfig,
    UpsertMcpServerInConfig,
    DeleteMcpServerInConfig,
    SetMcpEnabled,
    GetMcpServers,
    UpsertMcpServer,
    DeleteMcpServer,
    ToggleMcpApp,
    GetPrompts,
    UpsertPrompt,
    DeletePrompt,
    EnablePrompt,
    ImportPromptFromFile,
    GetCurrentPromptFileContent,
    GetSkills,
    InstallSkill,
    UninstallSkill,
    GetSkillRepos,
    AddSkillRepo,
    RemoveSkillRepo,
    GetSettings,
    SaveSettings,
    RestartApp,
    CheckForUpdates,
    IsPortableMode,
    GetConfigDir,
    OpenConfigFolder,
    PickDirectory,
    GetClaudeCodeConfigPath,
    GetAppConfigPath,
    OpenAppConfigFolder,
    GetAppConfigDirOverride,
    SetAppConfigDirOverride,
    ApplyClaudePluginConfig,
    SaveFileDialog,
    OpenFileDialog,
    ExportConfigToFile,
    ImportConfigFromFile,
    OpenExternal,
    GetClaudeCommonConfigSnippet,
    SetClaudeCommonConfigSnippet,
    GetCommonConfigSnippet,
    SetCommonConfigSnippet,
)

Command = Annotated[Union[_VARIANTS], Field(discriminator="command")]  # type: ignore[valid-type]

COMMAND_TYPES: dict[str, type[BaseCommand]] = {
    variant.model_fields["command"].default: variant for variant in _VARIANTS
}

_COMMAND_ADAPTER: TypeAdapter[Any] = TypeAdapter(Command)


def parse_command(name: str, args: Mapping[str, Any] | None = None) -> BaseCommand:
    """Build the typed command for ``name`` from a loosely-typed argument bag.

    ``None`` values count as absent, matching callers that pass ``null`` for
    arguments they do not have.
    """
    if name not in COMMAND_TYPES:
        raise UnsupportedCommandError(f"Command {name} is not supported in web mode")
    bag = {key: value for key, value in (args or {}).items() if value is not None}
    bag["command"] = name
    try:
        return _COMMAND_ADAPTER.validate_python(bag)
    except PydanticValidationError as exc:
        errors = exc.errors()
        for error in errors:
            if error.get("type") == "missing":
                raise _missing(str(error["loc"][-1]), name) from None
        first = errors[0]
        field_name = str(first["loc"][-1]) if first.get("loc") else "?"
        raise ValidationError(
            f'Invalid argument "{field_name}" for command "{name}": {first.get("msg")}'
        ) from None


def resolve(command: BaseCommand) -> CommandDescriptor:
    return command.endpoint()


def resolve_name(name: str, args: Mapping[str, Any] | None = None) -> CommandDescriptor:
    return resolve(parse_command(name, args))
