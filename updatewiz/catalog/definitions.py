from dataclasses import dataclass
from typing import Optional

SKIP_PREFIX = "skip_"


@dataclass(frozen=True)
class MaintenanceOption:
    id: str
    label: str
    category: str
    binary: Optional[str] = None  # None: nothing to probe, always offered

    @property
    def env_key(self) -> str:
        """Environment variable the script reads to skip this tool."""
        return SKIP_PREFIX + self.id


def _group(category, *entries):
    return {
        option_id: MaintenanceOption(option_id, label, category, binary)
        for option_id, label, binary in entries
    }


# Organized by Category
CATALOGUE = {
    "System": _group(
        "System",
        ("brew", "Homebrew", "brew"),
        ("port", "MacPorts", "port"),
        ("mas", "Mac App Store", "mas"),
        ("snap", "Snap", "snap"),
        ("flatpak", "Flatpak", "flatpak"),
        ("nix_env", "Nix", "nix-env"),
    ),
    "JavaScript": _group(
        "JavaScript",
        ("npm", "npm", "npm"),
        ("yarn", "yarn", "yarn"),
        ("pnpm", "pnpm", "pnpm"),
        ("bun", "Bun", "bun"),
        ("deno", "Deno", "deno"),
        ("nvm", "nvm", None),  # shell function, not a binary
        ("nodenv", "nodenv", "nodenv"),
    ),
    "Python": _group(
        "Python",
        ("pip", "pip", "pip"),
        ("pip3", "pip3", "pip3"),
        ("pipenv", "pipenv", "pipenv"),
        ("poetry", "Poetry", "poetry"),
        ("pdm", "PDM", "pdm"),
        ("uv", "uv", "uv"),
        ("conda", "Conda", "conda"),
        ("mamba", "Mamba", "mamba"),
        ("pyenv", "pyenv", "pyenv"),
    ),
    "Ruby": _group(
        "Ruby",
        ("gem", "gem", "gem"),
        ("rvm", "rvm", "rvm"),
        ("rbenv", "rbenv", "rbenv"),
    ),
    "Languages": _group(
        "Languages",
        ("rustup", "Rust", "rustup"),
        ("cargo", "Cargo", "cargo"),
        ("go", "Go", "go"),
        ("composer", "PHP/Composer", "composer"),
        ("cpan", "Perl/CPAN", "cpan"),
    ),
    "Version Managers": _group(
        "Version Managers",
        ("asdf", "asdf", "asdf"),
        ("mise", "mise", "mise"),
        ("goenv", "goenv", "goenv"),
        ("jenv", "jenv", "jenv"),
        ("sdk", "SDKMAN", None),
        ("tfenv", "tfenv", "tfenv"),
    ),
    "Cloud": _group(
        "Cloud",
        ("docker", "Docker", "docker"),
        ("helm", "Helm", "helm"),
        ("kubectl", "kubectl", "kubectl"),
        ("gh", "GitHub CLI", "gh"),
        ("gcloud", "Google Cloud", "gcloud"),
        ("aws", "AWS CLI", "aws"),
        ("az", "Azure CLI", "az"),
    ),
    "Dev Tools": _group(
        "Dev Tools",
        ("code", "VS Code", "code"),
        ("pod", "CocoaPods", "pod"),
        ("flutter", "Flutter", "flutter"),
    ),
    "Shell": _group(
        "Shell",
        ("omz", "Oh My Zsh", None),
        ("antibody", "Antibody", "antibody"),
        ("fisher", "Fisher", None),
        ("starship", "Starship", "starship"),
    ),
    "macOS": _group(
        "macOS",
        ("xcode_select", "Xcode Tools", "xcode-select"),
        ("softwareupdate", "Software Update", "softwareupdate"),
        ("disk_maintenance", "Disk Maintenance", "diskutil"),
        ("system_maintenance", "System Maintenance", None),
        ("spotlight", "Spotlight Rebuild", "mdutil"),
        ("launchpad", "Launchpad Reset", None),
    ),
    "Other": _group(
        "Other",
        ("self_update", "Self-Update", None),
        ("kav", "Kaspersky", "kav"),
        ("apm", "Atom", "apm"),
    ),
}


def all_options():
    for options in CATALOGUE.values():
        yield from options.values()


def get_option(option_id: str) -> Optional[MaintenanceOption]:
    for options in CATALOGUE.values():
        if option_id in options:
            return options[option_id]
    return None
