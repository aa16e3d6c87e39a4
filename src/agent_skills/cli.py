"""
Command Line Interface for agent-skills

Install, update, list and remove Agent Skills for AI coding assistants.
"""

import logging
import sys
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agent_skills.core.agents import (
    AGENTS,
    POPULAR_AGENT_FLAGS,
    AgentConfig,
    find_agent,
    install_dir,
    require_agent,
    unique_install_dirs,
)
from agent_skills.core.config import (
    AgentSkillsSettings,
    ProjectConfig,
    config_path,
    load_project_config,
    resolve_repos,
    save_project_config,
)
from agent_skills.skills.errors import SkillsError
from agent_skills.skills.manager import SkillsManager, find_candidate, find_installed
from agent_skills.skills.models import ReferenceSelection
from agent_skills.skills.scanner import scan_installed

app = typer.Typer(
    help="Install, update, and manage Agent Skills across AI coding assistants",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

ToolOption = typer.Option(None, "--tool", "-t", help="Target AI agent (cursor, claude-code, ...)")
GlobalOption = typer.Option(False, "--global", "-g", help="Use the user-level global directory")
RepoOption = typer.Option(None, "--repo", "-r", help="Override the source repository URL")


def configure_logging(settings: AgentSkillsSettings, verbose: bool = False) -> None:
    """Configure structlog from settings; --verbose forces DEBUG console output."""
    level = "DEBUG" if verbose else settings.log_level
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json" and not verbose
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        context_class=dict,
        cache_logger_on_first_use=False,
    )


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
):
    """Agent Skills package manager."""
    if ctx.obj is None:
        ctx.obj = SkillsManager(AgentSkillsSettings())
    configure_logging(ctx.obj.settings, verbose)


def _fail(error: Exception) -> None:
    err_console.print(f"\n[red]❌ {escape(str(error))}[/red]")
    raise typer.Exit(code=1)


def _prompt_choice(title: str, options: list[tuple[str, str]]) -> str:
    """Numbered single-choice prompt; returns the chosen value."""
    console.print(f"\n[bold]{title}[/bold]")
    for index, (label, _) in enumerate(options, 1):
        console.print(f"  [cyan]{index:>2}[/cyan]  {label}")
    while True:
        choice = typer.prompt("Select", type=int)
        if 1 <= choice <= len(options):
            return options[choice - 1][1]
        console.print(f"[yellow]Enter a number between 1 and {len(options)}[/yellow]")


def _prompt_multi(title: str, options: list[tuple[str, str]]) -> list[str]:
    """Numbered multi-choice prompt (comma separated); empty input selects nothing."""
    console.print(f"\n[bold]{title}[/bold]")
    for index, (label, _) in enumerate(options, 1):
        console.print(f"  [cyan]{index:>2}[/cyan]  {label}")
    raw = typer.prompt("Select (e.g. 1,3)", default="", show_default=False)

    selected = []
    for part in raw.replace(" ", "").split(","):
        if part.isdigit() and 1 <= int(part) <= len(options):
            value = options[int(part) - 1][1]
            if value not in selected:
                selected.append(value)
    return selected


def _prompt_agent() -> AgentConfig:
    popular = [a for a in AGENTS if a.flag in POPULAR_AGENT_FLAGS]
    others = [a for a in AGENTS if a.flag not in POPULAR_AGENT_FLAGS]
    options = [(f"{a.name} [dim]({a.project_path})[/dim]", a.flag) for a in popular + others]
    return require_agent(_prompt_choice("Which AI coding agent are you using?", options))


def _resolve_agent(tool: str | None, project: ProjectConfig | None) -> AgentConfig:
    """--tool flag > project defaultAgent > interactive prompt."""
    if tool:
        return require_agent(tool)
    if project and project.default_agent:
        agent = find_agent(project.default_agent)
        if agent:
            return agent
    return _prompt_agent()


def _print_target(agent: AgentConfig, global_: bool) -> None:
    suffix = " [yellow](global)[/yellow]" if global_ else ""
    console.print(f"\n[cyan]🎯 Target agent: [bold]{agent.name}[/bold][/cyan]{suffix}")


def _skills_table(rows: list[tuple[str, str]], title: str | None = None) -> Table:
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column("Skill", style="green")
    table.add_column("Description", style="dim")
    for name, description in rows:
        table.add_row(escape(name), escape(description or "No description"))
    return table


@app.command()
def add(
    ctx: typer.Context,
    skills: Optional[list[str]] = typer.Argument(None, help="Skill names to install (omit for interactive mode)"),
    tool: Optional[str] = ToolOption,
    global_: bool = GlobalOption,
    repo: Optional[str] = RepoOption,
    tech: Optional[list[str]] = typer.Option(None, "--tech", help="Reference tech topics to install"),
    vcs: Optional[str] = typer.Option(None, "--vcs", help="VCS platform for code-review references"),
):
    """
    Install skills into your project (or globally with -g).

    Example:
        agent-skills add pdf-processing --tool claude-code
    """
    manager: SkillsManager = ctx.obj
    try:
        project = load_project_config(manager.settings)
        agent = _resolve_agent(tool, project)
        _print_target(agent, global_)

        repos = resolve_repos(manager.settings, repo, project)
        console.print("[dim]\n📡 Fetching available skills...[/dim]")
        with manager.fetch(repos) as sources:
            if not sources.candidates:
                console.print("[yellow]\n⚠️  No skills found in the repository.[/yellow]")
                return

            if skills:
                selected = list(dict.fromkeys(find_candidate(sources.candidates, name) for name in skills))
            else:
                options = [
                    (f"[cyan]{escape(c.name)}[/cyan] [dim]- {escape(c.description or 'No description')}[/dim]", str(i))
                    for i, c in enumerate(sources.candidates)
                ]
                picked = _prompt_multi("📦 Select the skills to install:", options)
                selected = [sources.candidates[int(i)] for i in picked]
                if not selected:
                    console.print("[yellow]\nNo skills selected. Aborting.[/yellow]")
                    return

            techs = tech or (project.techs if project else None)
            platform = vcs or (project.vcs if project else None)
            if manager.needs_references(sources, selected):
                available = manager.available_references(sources)
                if techs is None and available.techs:
                    techs = _prompt_multi(
                        "🧰 Select the tech stacks you use:",
                        [(escape(t), t) for t in available.techs],
                    )
                if platform is None and available.vcs:
                    platform = _prompt_choice(
                        "🔀 Which VCS platform do you use?",
                        [(escape(p), p) for p in available.vcs],
                    )

            target = install_dir(agent, global_)
            console.print(f"[dim]\n📁 Installing to: {escape(str(target))}\n[/dim]")
            report = manager.install_candidates(
                sources,
                selected,
                target,
                ReferenceSelection.from_values(techs, platform),
            )

        for candidate in report.installed:
            console.print(f"  [green]✅ {escape(candidate.name)}[/green]")
            if candidate.trigger:
                console.print(f"     [dim]Trigger: {escape(candidate.trigger)}[/dim]")
        console.print(
            f"[green]\n🎉 Successfully installed {report.count} skill(s) to [bold]{escape(str(target))}[/bold][/green]"
        )
    except SkillsError as e:
        _fail(e)


@app.command()
def info(
    ctx: typer.Context,
    skill: str = typer.Argument(..., help="Skill name or directory name to inspect"),
    repo: Optional[str] = RepoOption,
):
    """Show detailed information about a skill."""
    manager: SkillsManager = ctx.obj
    try:
        repos = resolve_repos(manager.settings, repo, load_project_config(manager.settings))
        console.print("[dim]\n📡 Fetching skill details...\n[/dim]")
        with manager.fetch(repos) as sources:
            details = manager.info(sources, skill)
    except SkillsError as e:
        _fail(e)
        return

    candidate = details.candidate
    console.print(f"[bold cyan]  📦 {escape(candidate.name)}[/bold cyan]\n")
    console.print("[bold]  Description:[/bold]")
    if details.full_description:
        for line in details.full_description.split("\n"):
            console.print(f"    {escape(line.strip())}")
    else:
        console.print("    [dim]No description[/dim]")

    table = Table(show_header=False, box=None, padding=(0, 2), title="Details", title_justify="left")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Source", escape(candidate.origin))
    table.add_row("Directory", f"[green]{escape(candidate.directory_name)}[/green]")
    table.add_row("SKILL.md", f"{details.manifest_lines} lines")
    table.add_row(
        "References",
        "[yellow]Yes (will install references/ directory)[/yellow]" if details.uses_references else "No",
    )
    if candidate.trigger:
        table.add_row("Trigger", escape(candidate.trigger))
    console.print()
    console.print(table)

    console.print("\n[bold]  Files:[/bold]")
    for file in details.files:
        console.print(f"    [dim]{escape(file)}[/dim]")


@app.command("list")
def list_skills(
    ctx: typer.Context,
    remote: bool = typer.Option(False, "--remote", help="List skills available from the source repositories"),
    tool: Optional[str] = ToolOption,
    global_: bool = GlobalOption,
    repo: Optional[str] = RepoOption,
):
    """List installed skills or available remote skills."""
    manager: SkillsManager = ctx.obj
    try:
        if remote:
            repos = resolve_repos(manager.settings, repo, load_project_config(manager.settings))
            console.print("[cyan]\n📡 Fetching available skills from remote...\n[/cyan]")
            with manager.fetch(repos) as sources:
                candidates = list(sources.candidates)
            if not candidates:
                console.print("[yellow]  No skills found in the repository.[/yellow]")
                return
            console.print(_skills_table([(c.name, c.description) for c in candidates]))
            console.print(f"[dim]\n  Total: {len(candidates)} skill(s) available[/dim]")
            return

        if tool:
            agent = require_agent(tool)
            targets = [(agent, install_dir(agent, global_))]
        else:
            targets = unique_install_dirs(global_)
    except SkillsError as e:
        _fail(e)
        return

    console.print("[cyan]\n📦 Scanning locally installed skills...\n[/cyan]")
    total = 0
    for agent, target in targets:
        installed = scan_installed(target)
        if not installed:
            continue
        path = agent.global_path if global_ else agent.project_path
        console.print(
            _skills_table(
                [(s.name, s.description) for s in installed],
                title=f"{agent.name} ({path}/)",
            )
        )
        console.print()
        total += len(installed)

    if total == 0:
        console.print(
            "[yellow]  No skills found.\n"
            '  Run "agent-skills add" to install skills.[/yellow]'
        )
    else:
        console.print(f"[dim]  Total: {total} skill(s) installed[/dim]")


@app.command()
def remove(
    ctx: typer.Context,
    skills: Optional[list[str]] = typer.Argument(None, help="Skill names to remove (omit for interactive mode)"),
    tool: Optional[str] = ToolOption,
    global_: bool = GlobalOption,
):
    """Remove installed skills from your project (or globally with -g)."""
    manager: SkillsManager = ctx.obj
    try:
        agent = _resolve_agent(tool, load_project_config(manager.settings))
        _print_target(agent, global_)

        target = install_dir(agent, global_)
        installed = scan_installed(target)
        if not installed:
            console.print(
                "[yellow]\n⚠️  No skills installed for this agent.\n"
                '  Run "agent-skills add" to install skills.[/yellow]'
            )
            return

        if skills:
            selected = list(dict.fromkeys(find_installed(installed, name) for name in skills))
        else:
            picked = _prompt_multi(
                "🗑️  Select the skills to remove:",
                [
                    (f"[cyan]{escape(s.name)}[/cyan] [dim]- {escape(s.description)}[/dim]", str(i))
                    for i, s in enumerate(installed)
                ],
            )
            selected = [installed[int(i)] for i in picked]
            if not selected:
                console.print("[yellow]\nNo skills selected. Aborting.[/yellow]")
                return

        console.print(f"[dim]\n🗑️  Removing from: {escape(str(target))}\n[/dim]")
        report = manager.remove_installed(target, selected)
    except SkillsError as e:
        _fail(e)
        return

    for skill in report.removed:
        console.print(f"  [red]✖ {escape(skill.name)} - removed[/red]")
    if report.references_cleaned:
        console.print("[dim]\n  🧹 Cleaned up unused references directory.[/dim]")
    console.print(f"[green]\n🎉 Successfully removed {report.count} skill(s).[/green]")


@app.command()
def search(
    ctx: typer.Context,
    keyword: str = typer.Argument(..., help="Keyword to search for in skill names and descriptions"),
    repo: Optional[str] = RepoOption,
):
    """Search for skills by keyword in the source repositories."""
    manager: SkillsManager = ctx.obj
    try:
        repos = resolve_repos(manager.settings, repo, load_project_config(manager.settings))
        console.print(f'[cyan]\n🔍 Searching for "{escape(keyword)}"...\n[/cyan]')
        with manager.fetch(repos) as sources:
            matched = manager.search(sources, keyword)
    except SkillsError as e:
        _fail(e)
        return

    if not matched:
        console.print(f'[yellow]  No skills found matching "{escape(keyword)}".[/yellow]')
        console.print("[dim]  Run [white]agent-skills list --remote[/white] to browse all available skills.[/dim]")
        return

    console.print(_skills_table([(c.name, c.description) for c in matched]))
    console.print(f'[dim]\n  Found {len(matched)} skill(s) matching "{escape(keyword)}"[/dim]')
    console.print("[dim]  Install with: [white]agent-skills add <skill-name> --tool <agent>[/white][/dim]")


@app.command()
def update(
    ctx: typer.Context,
    skills: Optional[list[str]] = typer.Argument(None, help="Specific skill names to update (omit to update all)"),
    global_: bool = GlobalOption,
    repo: Optional[str] = RepoOption,
):
    """Update installed skills to the latest version."""
    manager: SkillsManager = ctx.obj
    updated_count = 0
    try:
        project = load_project_config(manager.settings)
        selection = ReferenceSelection.from_values(
            project.techs if project else None,
            project.vcs if project else None,
        )
        repos = resolve_repos(manager.settings, repo, project)
        console.print("[cyan]\n🔄 Checking for skill updates...\n[/cyan]")
        with manager.fetch(repos) as sources:
            if not sources.candidates:
                console.print("[yellow]  No skills found in the remote repository.[/yellow]")
                return

            for agent, target in unique_install_dirs(global_):
                if not scan_installed(target):
                    continue
                report = manager.update(sources, target, skills or None, selection)
                if not report.updated and not report.skipped:
                    continue

                path = agent.global_path if global_ else agent.project_path
                console.print(f"[bold]  {agent.name} ({path}/)[/bold]")
                for name in report.updated:
                    console.print(f"    [green]✅ {escape(name)} - updated[/green]")
                for name, reason in report.skipped.items():
                    if reason == "up_to_date":
                        console.print(f"    [dim]⏭  {escape(name)} - already up to date[/dim]")
                    else:
                        console.print(f"    [dim]⏭  {escape(name)} - not found in remote, skipping[/dim]")
                console.print()
                updated_count += report.count
    except SkillsError as e:
        _fail(e)
        return

    if updated_count == 0:
        console.print(
            "[yellow]  No installed skills needed updating.\n"
            '  Run "agent-skills list" to see installed skills.[/yellow]'
        )
    else:
        console.print(f"[green]🎉 Updated {updated_count} skill(s) successfully.[/green]")


@app.command()
def init(ctx: typer.Context):
    """Initialize a project config file with a default agent and repositories."""
    manager: SkillsManager = ctx.obj
    settings = manager.settings
    path = config_path(settings)
    if path.exists() and not typer.confirm(f"{settings.config_filename} already exists. Overwrite?", default=False):
        console.print("[yellow]Aborted.[/yellow]")
        return

    console.print(f"[cyan]\nLet's set up your {settings.config_filename}!\n[/cyan]")
    agent = _prompt_agent()

    console.print(f"[dim]\nDefault repository: {escape(settings.default_repo)}[/dim]")
    raw = typer.prompt("Repositories (comma separated)", default=settings.default_repo)
    repos = [r.strip() for r in raw.split(",") if r.strip()] or [settings.default_repo]

    config = ProjectConfig(default_agent=agent.flag)
    if repos != [settings.default_repo]:
        config.repos = repos

    save_project_config(settings, config)
    console.print(f"[green]\n🎉 Successfully created {settings.config_filename}[/green]")
    console.print("[dim]Run `agent-skills add` and these defaults will be used automatically.\n[/dim]")


app.command("ls", hidden=True)(list_skills)
app.command("rm", hidden=True)(remove)
app.command("find", hidden=True)(search)


if __name__ == "__main__":
    app()
