"""Prompt loading for the enrichment service."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"


class PromptLoader:
    """Loads and renders prompts with Jinja2 templating."""

    def __init__(self, prompts_dir: Path | None = None):
        self.prompts_dir = prompts_dir or PROMPTS_DIR
        self._env: Environment | None = None

    @property
    def env(self) -> Environment:
        """Get or create the Jinja2 environment."""
        if self._env is None:
            self._env = Environment(
                loader=FileSystemLoader(str(self.prompts_dir)),
                autoescape=select_autoescape(enabled_extensions=()),
                undefined=StrictUndefined,
                trim_blocks=True,
                lstrip_blocks=True,
            )
        return self._env

    def render(self, group: str, name: str, **context) -> str:
        """Render ``<group>/<name>.md`` with the given variables.

        Raises:
            jinja2.TemplateNotFound: If the template does not exist.
        """
        template = self.env.get_template(f"{group}/{name}.md")
        return template.render(**context).strip()

    def list_prompts(self, group: str) -> list[str]:
        group_dir = self.prompts_dir / group
        if not group_dir.exists():
            return []
        return sorted(p.stem for p in group_dir.glob("*.md"))
