# Identifies this tool to the GitHub API
USER_AGENT = "rust-lang/promote-release"

GITHUB_API_URL = "https://api.github.com"

# Repository whose Cargo.toml and release branches drive rustup promotions
RUSTUP_REPOSITORY = "rust-lang/rustup"

CONFIG_SECTION = "promote-release"
ENV_PREFIX = "PROMOTE_RELEASE_"

RELEASE_MANIFEST_NAME = "release-stable.toml"

# Consumers treat any other schema version as incompatible
RELEASE_MANIFEST_SCHEMA_VERSION = "1"
