"""Backport PR title template and comment bodies."""

import re

_PLACEHOLDER_RE = re.compile(r"\{\{(base|originalTitle)\}\}")


def render_title(template: str, base: str, original_title: str) -> str:
    """Substitute {{base}} and {{originalTitle}}; other text is kept as is.

    >>> render_title("[Backport {{base}}] {{originalTitle}}", "v9.2.x", "Fix it")
    '[Backport v9.2.x] Fix it'
    """
    values = {"base": base, "originalTitle": original_title}
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)


def backport_body(commit: str, pr_number: int) -> str:
    return f"Backport {commit} from #{pr_number}"


def missing_labels_comment_body(author: str) -> str:
    return "\n".join(
        [
            f"Hello @{author}!",
            "Backport pull requests need to be either:",
            "* Pull requests which address bugs,",
            "* Urgent fixes which need product approval, in order to get merged,",
            "* Docs changes.\n",
            "Please, if the current pull request addresses a bug fix, label it with the `type/bug` label.",
            "If it already has the product approval, please add the `product-approved` label. "
            "For docs changes, please add the `type/docs` label.",
            "If none of the above applies, please consider removing the backport label "
            "and target the next major/minor release.",
            "Thanks!",
        ]
    )


def failed_backport_comment_body(base: str, head: str, commit: str, error_message: str) -> str:
    """Comment for the original PR with the error and a manual recipe."""
    return "\n".join(
        [
            f"The backport to `{base}` failed:",
            "```",
            error_message,
            "```",
            "To backport manually, run these commands in your terminal:",
            "```bash",
            "# Fetch latest updates from GitHub",
            "git fetch",
            "# Create a new branch",
            f"git switch --create {head} origin/{base}",
            "# Cherry-pick the merged commit of this pull request and resolve the conflicts",
            f"git cherry-pick -x {commit}",
            "# Push it to GitHub",
            f"git push --set-upstream origin {head}",
            "git switch main",
            "# Remove the local backport branch",
            f"git branch -D {head}",
            "```",
            f"Then, create a pull request where the `base` branch is `{base}` "
            f"and the `compare`/`head` branch is `{head}`.",
        ]
    )
