"""ipa-ck - IPA documentation workflow template CLI

Philosophy:
- Ruthless simplicity
- Never clobber user content without a backup
- Fail fast with helpful guidance

ipa-ck installs a versioned documentation template (CLAUDE.md, README.md and a
.claude/ folder of skills, commands and workflows) into a project directory and
keeps it up to date while preserving local customizations.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
