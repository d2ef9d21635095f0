"""Example expressions and a realistic sample context.

``EXAMPLES`` is a catalogue of typical workflow expressions grouped by
category; ``sample_context()`` returns a snapshot shaped like a push to
``main`` on a hosted Linux runner, so every example has data to work on.
The ``ghexpr examples`` command runs the catalogue against that snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass

from ghexpr.context import ContextSnapshot, ContextVariable

__all__ = [
    "ExpressionExample",
    "EXAMPLES",
    "categories",
    "examples_in",
    "sample_variables",
    "sample_context",
]


@dataclass(frozen=True, slots=True)
class ExpressionExample:
    """A catalogued example expression.

    Attributes:
        title: Short display name.
        expression: Expression text (without the ${{ }} wrapper).
        description: What the expression checks or produces.
        category: Group the example is listed under.
    """

    title: str
    expression: str
    description: str
    category: str


def _group(category: str, *entries: tuple[str, str, str]) -> list[ExpressionExample]:
    return [
        ExpressionExample(title, expression, description, category)
        for title, expression, description in entries
    ]


EXAMPLES: tuple[ExpressionExample, ...] = (
    *_group(
        "Branch & Event",
        ("Main Branch Check", "github.ref == 'refs/heads/main'",
         "Check if running on main branch"),
        ("Pull Request Event", "github.event_name == 'pull_request'",
         "Check if triggered by pull request"),
        ("Feature Branch", "contains(github.ref, 'feature/')",
         "Check if on a feature branch"),
        ("Tag Check", "startsWith(github.ref, 'refs/tags/')",
         "Check if triggered by a tag"),
    ),
    *_group(
        "Variables & Secrets",
        ("Environment Variable with Default", "env.NODE_VERSION || '16'",
         "Get NODE_VERSION or default to 16"),
        ("Secret Exists", "secrets.DEPLOY_KEY != ''",
         "Check if secret is set"),
        ("Format with Variables", "format('branch-{0}', vars.BRANCH_NAME)",
         "Build a name from a configuration variable"),
    ),
    *_group(
        "String Functions",
        ("Contains Check", "contains(github.repository, 'octocat')",
         "Check if repository contains string"),
        ("Starts With Branch", "startsWith(github.ref, 'refs/heads/')",
         "Check if reference is a branch"),
        ("Ends With", "endsWith(github.ref, '/main')",
         "Check if ref ends with /main"),
        ("Join Commit Messages", "join(github.event.commits.*.message, '; ')",
         "Join the messages of all pushed commits"),
    ),
    *_group(
        "JSON Functions",
        ("GitHub Context to JSON", "toJSON(github)",
         "Convert entire github context to JSON"),
        ("Event Payload to JSON", "toJSON(github.event)",
         "View full event payload as JSON"),
        ("Parse JSON String", "fromJSON('{\"environment\": \"production\"}')",
         "Parse JSON string to object"),
    ),
    *_group(
        "Status Functions",
        ("Success Check", "success()",
         "Returns true if all previous steps succeeded"),
        ("Failure Check", "failure()",
         "Returns true if any previous step failed"),
        ("Always Run", "always()",
         "Always returns true (for cleanup steps)"),
        ("Cancelled Check", "cancelled()",
         "Returns true if workflow was cancelled"),
    ),
    *_group(
        "Deep Context Access",
        ("Repository Owner", "github.event.repository.owner.login",
         "Access nested repository owner login"),
        ("Commit Author Email", "github.event.pusher.email",
         "Get the email of the person who pushed"),
        ("Runner Architecture", "runner.arch",
         "Get the architecture of the runner (X64, ARM64, etc.)"),
        ("Strategy Job Index", "strategy.job_index",
         "Get the index of the current job in a matrix"),
        ("First Matrix Entry", "matrix.include[0].node",
         "Read a field of the first matrix include entry"),
    ),
    *_group(
        "Advanced JSON",
        ("Parse JSON Array String",
         "toJSON(fromJSON('[\"ubuntu-latest\", \"windows-latest\", \"macos-latest\"]'))",
         "Parse JSON array and convert back to string"),
        ("Check Array Membership",
         "contains(fromJSON('[\"push\", \"pull_request\"]'), github.event_name)",
         "Check if event is in allowed list using JSON"),
        ("Parse Config Object",
         "contains(toJSON(fromJSON('{\"deploy\": true}')), 'deploy')",
         "Parse JSON and check for property"),
        ("Nested JSON Object",
         "toJSON(fromJSON('{\"env\": {\"prod\": \"api.prod.com\"}}'))",
         "Parse and re-stringify nested JSON object"),
    ),
    *_group(
        "Complex Examples",
        ("Multi-condition Branch Check",
         "github.event_name == 'push' && startsWith(github.ref, 'refs/heads/')",
         "Combine conditions to filter branch pushes"),
        ("Production Deployment Gate", "github.ref == 'refs/heads/main' && success()",
         "Check conditions before production deploy"),
        ("Version from Job Output",
         "format('v{0}-{1}', needs.build.outputs.version, github.run_number)",
         "Combine job output with run number for versioning"),
        ("Dynamic Environment Name",
         "format('{0}-{1}-{2}', matrix.os, matrix.node, github.sha)",
         "Build environment name from matrix and commit"),
        ("Branch-based Configuration",
         "contains(github.ref, 'release/') || contains(github.ref, 'main')",
         "Check if branch is a release or main branch"),
        ("Array Contains via JSON",
         "contains(fromJSON(vars.DEPLOY_ENVIRONMENTS), env.ENVIRONMENT)",
         "Check if environment is in deployment list"),
        ("Event Metadata Format",
         "format('🚀 {0}@{1} by @{2}', github.repository, github.sha, github.actor)",
         "Build rich deployment message with emojis"),
        ("Fallback Values", "env.NODE_VERSION != '' && env.NODE_VERSION || '18'",
         "Use environment variable with fallback"),
        ("Ternary Idiom",
         "github.ref == 'refs/heads/main' && 'production' || 'staging'",
         "Pick a deployment target based on the branch"),
    ),
)


def categories() -> list[str]:
    """Return example categories in catalogue order."""
    return list(dict.fromkeys(example.category for example in EXAMPLES))


def examples_in(category: str | None = None) -> list[ExpressionExample]:
    """Return the examples of one category (case-insensitive), or all of them."""
    if category is None:
        return list(EXAMPLES)
    wanted = category.lower()
    return [example for example in EXAMPLES if example.category.lower() == wanted]


def sample_variables() -> list[ContextVariable]:
    """Return the scoped env, vars and secrets entries of the sample context."""
    return [
        ContextVariable(name="NODE_VERSION", value="18", type="env", scope="workflow"),
        ContextVariable(name="APP_ENV", value="production", type="env", scope="workflow"),
        ContextVariable(name="ENVIRONMENT", value="production", type="env", scope="workflow"),
        ContextVariable(name="TEST_ENV", value="test", type="env", scope="job"),
        ContextVariable(
            name="DATABASE_URL",
            value="postgresql://localhost:5432/test",
            type="secrets",
            scope="step",
        ),
        ContextVariable(name="DEPLOY_KEY", value="secret-key-123", type="secrets", scope="step"),
        ContextVariable(name="BRANCH_NAME", value="main", type="vars", scope="workflow"),
        ContextVariable(
            name="DEPLOY_ENVIRONMENTS",
            value='["production", "staging"]',
            type="vars",
            scope="workflow",
        ),
    ]


def sample_context() -> ContextSnapshot:
    """Return a snapshot of a push to ``main`` of ``owner/repo``.

    A fresh snapshot is built on every call.
    """
    base = ContextSnapshot(
        github={
            "repository": "owner/repo",
            "repository_owner": "owner",
            "ref": "refs/heads/main",
            "sha": "abc123456789",
            "event_name": "push",
            "actor": "github-user",
            "workflow": "CI",
            "job": "build",
            "run_id": "1234567890",
            "run_number": "42",
            "run_attempt": "1",
            "api_url": "https://api.github.com",
            "server_url": "https://github.com",
            "graphql_url": "https://api.github.com/graphql",
            "workspace": "/github/workspace",
            "action": "__self",
            "head_ref": "",
            "base_ref": "",
            "token": "***",
            "env": "github-hosted",
            "path": "",
            "event": {
                "ref": "refs/heads/main",
                "before": "previous-commit-sha",
                "after": "abc123456789",
                "repository": {
                    "id": 123456789,
                    "name": "repo",
                    "full_name": "owner/repo",
                    "owner": {"login": "owner", "id": 987654321},
                    "default_branch": "main",
                    "private": False,
                },
                "pusher": {"name": "github-user", "email": "user@example.com"},
                "commits": [
                    {
                        "id": "abc123456789",
                        "message": "Add new feature",
                        "author": {"name": "Developer", "email": "dev@example.com"},
                    }
                ],
            },
        },
        matrix={
            "os": "ubuntu-latest",
            "node": "18",
            "include": [
                {"os": "ubuntu-latest", "node": "16"},
                {"os": "ubuntu-latest", "node": "18"},
                {"os": "windows-latest", "node": "18"},
            ],
        },
        needs={
            "build": {
                "result": "success",
                "outputs": {"version": "1.2.3", "artifact_id": "build-123"},
            }
        },
        runner={
            "name": "GitHub Actions 2",
            "os": "Linux",
            "arch": "X64",
            "temp": "/tmp",
            "tool_cache": "/opt/hostedtoolcache",
            "workspace": "/home/runner/work",
        },
        strategy={
            "fail_fast": True,
            "job_index": 0,
            "job_total": 3,
            "max_parallel": 10,
        },
    )
    return ContextSnapshot.from_variables(sample_variables(), base=base)
