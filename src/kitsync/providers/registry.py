"""Static registry of supported providers and their install targets.

Paths are templates: project paths are relative to the project root and
global paths are relative to the user's home directory. Resolution against
real roots happens in TargetLocator.
"""

from pathlib import Path

from kitsync.models.provider import ConversionFormat, ProviderConfig, ProviderTarget


def _per_file(
    project: str | None,
    global_: str | None,
    *,
    extension: str = ".md",
    format: ConversionFormat = "direct-copy",
) -> ProviderTarget:
    return ProviderTarget(
        project_path=project,
        global_path=global_,
        write_strategy="per-file",
        file_extension=extension,
        format=format,
    )


def _merged(project: str | None, global_: str | None) -> ProviderTarget:
    return ProviderTarget(
        project_path=project,
        global_path=global_,
        write_strategy="merge-single",
        file_extension=".md",
        format="fm-strip",
    )


def _single(project: str | None, global_: str | None) -> ProviderTarget:
    return ProviderTarget(
        project_path=project,
        global_path=global_,
        write_strategy="single-file",
        file_extension=".md",
        format="direct-copy",
    )


PROVIDERS: dict[str, ProviderConfig] = {
    "claude-code": ProviderConfig(
        name="claude-code",
        display_name="Claude Code",
        detect_path=".claude",
        targets={
            "agent": _per_file(".claude/agents", ".claude/agents"),
            "command": _per_file(".claude/commands", ".claude/commands"),
            "skill": _per_file(".claude/skills", ".claude/skills"),
            "config": _single("CLAUDE.md", ".claude/CLAUDE.md"),
            "rules": _per_file(".claude/rules", ".claude/rules"),
            "hooks": _per_file(".claude/hooks", ".claude/hooks", extension=""),
        },
    ),
    "opencode": ProviderConfig(
        name="opencode",
        display_name="OpenCode",
        detect_path=".config/opencode",
        targets={
            "agent": _per_file(".opencode/agents", ".config/opencode/agents"),
            "command": _per_file(".opencode/commands", ".config/opencode/commands"),
            "skill": _per_file(".opencode/skill", ".config/opencode/skill"),
        },
    ),
    "github-copilot": ProviderConfig(
        name="github-copilot",
        display_name="GitHub Copilot",
        detect_path=".copilot",
        targets={
            "agent": _per_file(".github/agents", None, extension=".agent.md", format="fm-to-fm"),
            "skill": _per_file(".github/skills", ".copilot/skills"),
            "config": _single(".github/copilot-instructions.md", None),
        },
    ),
    "codex": ProviderConfig(
        name="codex",
        display_name="Codex",
        detect_path=".codex",
        targets={
            "agent": _merged("AGENTS.md", ".codex/AGENTS.md"),
            "command": _per_file(None, ".codex/prompts"),
            "skill": _per_file(".codex/skills", ".codex/skills"),
        },
    ),
    "cursor": ProviderConfig(
        name="cursor",
        display_name="Cursor",
        detect_path=".cursor",
        targets={
            "agent": _per_file(
                ".cursor/rules", ".cursor/rules", extension=".mdc", format="fm-to-fm"
            ),
            "skill": _per_file(".cursor/skills", ".cursor/skills"),
        },
    ),
    "roo": ProviderConfig(
        name="roo",
        display_name="Roo Code",
        detect_path=".roo",
        targets={
            "agent": ProviderTarget(
                project_path=".roomodes",
                global_path=".roo/custom_modes.yaml",
                write_strategy="yaml-merge",
                file_extension=".yaml",
                format="fm-to-yaml",
            ),
            "skill": _per_file(".roo/skills", ".roo/skills"),
        },
    ),
    "kilo": ProviderConfig(
        name="kilo",
        display_name="Kilo Code",
        detect_path=".kilocode",
        targets={
            "agent": ProviderTarget(
                project_path=".kilocodemodes",
                global_path=".kilocode/custom_modes.yaml",
                write_strategy="yaml-merge",
                file_extension=".yaml",
                format="fm-to-yaml",
            ),
            "skill": _per_file(".kilocode/skills", ".kilocode/skills"),
        },
    ),
    "windsurf": ProviderConfig(
        name="windsurf",
        display_name="Windsurf",
        detect_path=".codeium/windsurf",
        targets={
            "agent": _per_file(".windsurf/rules", ".codeium/windsurf/rules", format="fm-strip"),
            "skill": _per_file(".windsurf/skills", ".codeium/windsurf/skills"),
        },
    ),
    "goose": ProviderConfig(
        name="goose",
        display_name="Goose",
        detect_path=".config/goose",
        targets={
            "agent": _merged("AGENTS.md", None),
            "skill": _per_file(".goose/skills", ".config/goose/skills"),
        },
    ),
    "gemini-cli": ProviderConfig(
        name="gemini-cli",
        display_name="Gemini CLI",
        detect_path=".gemini",
        targets={
            "agent": _merged("AGENTS.md", ".gemini/GEMINI.md"),
            "command": _per_file(
                ".gemini/commands", ".gemini/commands", extension=".toml", format="md-to-toml"
            ),
            "skill": _per_file(".gemini/skills", ".gemini/skills"),
            "config": _single("GEMINI.md", None),
        },
    ),
    "amp": ProviderConfig(
        name="amp",
        display_name="Amp",
        detect_path=".config/amp",
        targets={
            "agent": _merged("AGENTS.md", ".config/AGENTS.md"),
            "skill": _per_file(".agents/skills", ".config/agents/skills"),
        },
    ),
    "antigravity": ProviderConfig(
        name="antigravity",
        display_name="Antigravity",
        detect_path=".gemini/antigravity",
        targets={
            "agent": _per_file(".agent/rules", ".gemini/antigravity", format="fm-strip"),
            "skill": _per_file(".agent/skills", ".gemini/antigravity/skills"),
        },
    ),
    "cline": ProviderConfig(
        name="cline",
        display_name="Cline",
        detect_path=".cline",
        targets={
            "agent": ProviderTarget(
                project_path=".clinerules",
                global_path=None,
                write_strategy="json-merge",
                file_extension=".md",
                format="fm-to-json",
            ),
            "skill": _per_file(".cline/skills", ".cline/skills"),
        },
    ),
    "openhands": ProviderConfig(
        name="openhands",
        display_name="OpenHands",
        detect_path=".openhands",
        targets={
            "agent": _per_file(".openhands/skills", ".openhands/skills", format="fm-to-fm"),
            "skill": _per_file(".openhands/skills", ".openhands/skills"),
        },
    ),
}

DEFAULT_PROVIDER = "claude-code"


def all_provider_names() -> list[str]:
    return list(PROVIDERS)


def get_provider(name: str) -> ProviderConfig:
    """Return a provider by name.

    Raises:
        ValueError: If the provider is unknown
    """
    provider = PROVIDERS.get(name)
    if provider is None:
        known = ", ".join(PROVIDERS)
        raise ValueError(f"Unknown provider: {name} (known providers: {known})")
    return provider


def validate_provider_names(names: list[str]) -> list[str]:
    """Validate provider names, dropping duplicates while keeping order."""
    for name in names:
        get_provider(name)
    return list(dict.fromkeys(names))


def detect_providers(home_dir: Path) -> list[str]:
    """Return providers whose tool directory exists under the home directory."""
    return [
        name for name, provider in PROVIDERS.items() if (home_dir / provider.detect_path).is_dir()
    ]
