"""
Workflow emitter — render the git workflow as a bash/zsh function.

The generated function is the shell rendition of the state machine in
``quickalias.core.engine.workflow``:

    Init → Preconditions → NoOpCheck → RemoteCheck → MessageSource
         → Review → StageAndCommit → Push → Done

The commit variant skips NoOpCheck, RemoteCheck and Push, and requires
a non-empty index instead.

Text is assembled from the template segments below with ``{{token}}``
placeholders.  The output must stay scannable by
``profile_ops.find_block_end``: every brace outside quotes balances and
no backticks are used.  Only syntax accepted by both bash and zsh is
emitted (no arrays, no ``[[ ]]``, no word splitting of unquoted
variables).
"""

from __future__ import annotations

from datetime import UTC, datetime

from quickalias.core.models.provider import ProviderConfig
from quickalias.core.models.settings import Settings
from quickalias.core.services.commit_prompt import shell_prompt
from quickalias.core.services.providers import build_command

RULE = "━" * 66

KINDS = ("push", "commit")

# ── Shared segments ─────────────────────────────────────────────


_HEADER = """\
# {{title}} ({{alias}} alias)
# Provider: {{provider_name}} | Model: {{model_label}}
{{alias}}() {
    local GREEN=$'\\033[0;32m'
    local YELLOW=$'\\033[1;33m'
    local BLUE=$'\\033[0;34m'
    local RED=$'\\033[0;31m'
    local NC=$'\\033[0m'
    local BOLD=$'\\033[1m'
    local DIM=$'\\033[2m'

    local review_mode=false
    if [ "$1" = "-r" ]; then
        review_mode=true
        shift
    fi
    local user_message="$*"

    if ! command -v git > /dev/null 2>&1; then
        echo "${RED}Error:${NC} git is not installed" >&2
        return 1
    fi

    if ! git rev-parse --is-inside-work-tree > /dev/null 2>&1; then
        echo "${RED}Error:${NC} Not a git repository" >&2
        return 1
    fi

    if [ -n "$(git ls-files -u 2>/dev/null)" ]; then
        echo "${RED}Error:${NC} Unresolved merge conflicts; resolve them first" >&2
        return 1
    fi

    local current_branch
    current_branch=$(git branch --show-current 2>/dev/null)
    if [ -z "$current_branch" ]; then
        echo "${RED}Error:${NC} Detached HEAD; check out a branch first" >&2
        return 1
    fi
"""

_PUSH_CHECKS = """
    local has_staged=false has_unstaged=false has_untracked=false
    git diff --cached --quiet 2>/dev/null || has_staged=true
    git diff --quiet 2>/dev/null || has_unstaged=true
    if [ -n "$(git ls-files --others --exclude-standard 2>/dev/null)" ]; then
        has_untracked=true
    fi

    if [ "$has_staged" = false ] && [ "$has_unstaged" = false ] && [ "$has_untracked" = false ]; then
        echo "${YELLOW}Nothing to commit${NC} - working tree clean"
        local unpushed
        unpushed=$(git log '@{u}..' --oneline 2>/dev/null | wc -l | tr -d ' ')
        if [ "${unpushed:-0}" -gt 0 ] 2>/dev/null; then
            echo "${DIM}You have ${unpushed} unpushed commit(s)${NC}"
            printf '%s' "${YELLOW}Push existing commits? [Y/n]:${NC} "
            local push_only
            read -r push_only
            case "$push_only" in
                [nN]*)
                    ;;
                *)
                    if ! git push origin "$current_branch"; then
                        echo "${RED}Error:${NC} Push failed" >&2
                        return 1
                    fi
                    echo "${GREEN}✓ Pushed${NC}"
                    ;;
            esac
        fi
        return 0
    fi

    local skip_push=false
    if ! git remote get-url origin > /dev/null 2>&1; then
        echo "${YELLOW}Warning:${NC} No remote 'origin' configured; will commit without pushing"
        skip_push=true
    fi
"""

_COMMIT_CHECKS = """
    if git diff --cached --quiet 2>/dev/null; then
        echo "${RED}Error:${NC} No staged changes; stage files with 'git add' first" >&2
        return 1
    fi
"""

_BANNER = """
    echo ""
    echo "${BOLD}${BLUE}{{rule}}${NC}"
    echo "${BOLD}{{headline}}${NC}"
    echo "${BOLD}${BLUE}{{rule}}${NC}"
"""

_MESSAGE_SOURCE = """
    local commit_message=""
    if [ -n "$user_message" ]; then
        echo ""
        echo "${GREEN}✓${NC} Using provided commit message"
        commit_message="$user_message"
    else
        if ! command -v {{binary}} > /dev/null 2>&1; then
            echo "${RED}Error:${NC} {{provider_name}} CLI ({{binary}}) is not installed" >&2
            return 1
        fi

        echo ""
        echo "${YELLOW}[1/{{steps}}]${NC} 🔍 Analyzing {{scope}}..."
{{capture}}
        local prompt="{{prompt}}"

        echo "${YELLOW}[2/{{steps}}]${NC} 🤖 Generating commit message with {{provider_name}}..."
        echo "${DIM}     (this may take a few seconds...)${NC}"

        local temp_file error_file gen_exit=0
        temp_file=$(mktemp)
        error_file=$(mktemp)
        if command -v timeout > /dev/null 2>&1; then
            timeout {{gen_timeout}} {{command}} < /dev/null > "$temp_file" 2> "$error_file" || gen_exit=$?
        else
            {{command}} < /dev/null > "$temp_file" 2> "$error_file" || gen_exit=$?
        fi

        if [ "$gen_exit" -eq 124 ]; then
            echo "${RED}Error:${NC} {{provider_name}} timed out after {{gen_timeout}} seconds" >&2
            rm -f "$temp_file" "$error_file"
            return 1
        fi
        if [ "$gen_exit" -ne 0 ] || [ ! -s "$temp_file" ]; then
            echo "${RED}Error:${NC} Failed to generate commit message" >&2
            cat "$error_file" >&2
            rm -f "$temp_file" "$error_file"
            return 1
        fi

        commit_message=$(cat "$temp_file")
        rm -f "$temp_file" "$error_file"

        echo ""
        echo "${GREEN}Generated Commit Message:${NC}"
        echo "${DIM}{{rule}}${NC}"
        printf '%s\\n' "$commit_message"
        echo "${DIM}{{rule}}${NC}"

        if [ "$review_mode" = true ]; then
            echo ""
            printf '%s' "${YELLOW}Proceed with this commit message? [Y/n/e(dit)]:${NC} "
            local confirm
            read -r confirm
            case "$confirm" in
                [nN]*)
                    echo "${YELLOW}Aborted.${NC}"
                    return 0
                    ;;
                [eE]*)
                    local edit_file
                    edit_file=$(mktemp)
                    printf '%s\\n' "$commit_message" > "$edit_file"
                    eval "${EDITOR:-{{editor}}} \\"\\$edit_file\\""
                    commit_message=$(cat "$edit_file")
                    rm -f "$edit_file"
                    if [ -z "$commit_message" ]; then
                        echo "${YELLOW}Empty commit message; aborted.${NC}"
                        return 0
                    fi
                    ;;
            esac
        fi
    fi
"""

_PUSH_CAPTURE = """
        local staged_diff unstaged_diff untracked_files
        staged_diff=$(git diff --cached 2>/dev/null | head -n {{diff_limit}})
        unstaged_diff=$(git diff 2>/dev/null | head -n {{diff_limit}})
        untracked_files=$(git ls-files --others --exclude-standard 2>/dev/null | head -n {{untracked_limit}})
"""

_COMMIT_CAPTURE = """
        local staged_diff
        staged_diff=$(git diff --cached 2>/dev/null | head -n {{diff_limit}})
"""

_PUSH_TAIL = """
    echo ""
    echo "${YELLOW}[3/4]${NC} 📦 Staging and committing changes..."
    git add -A
    if git diff --cached --quiet 2>/dev/null; then
        echo "${YELLOW}Nothing to commit${NC}"
        return 0
    fi
    if ! git commit -m "$commit_message"; then
        echo "${RED}Error:${NC} git commit failed" >&2
        return 1
    fi
    echo "${GREEN}✓${NC} Changes committed"

    if [ "$skip_push" = true ]; then
        echo ""
        echo "${YELLOW}Skipping push${NC} - no remote configured"
        echo "${BOLD}${GREEN}✨ Done!${NC}"
        return 0
    fi

    echo ""
    echo "${YELLOW}[4/4]${NC} 🚀 Pushing to origin/${current_branch}..."
    local push_output push_exit=0
    push_output=$(git push origin "$current_branch" 2>&1) || push_exit=$?
    if [ "$push_exit" -ne 0 ]; then
        if printf '%s\\n' "$push_output" | grep -qi "no upstream"; then
            echo "${DIM}No upstream branch; retrying with --set-upstream${NC}"
            push_exit=0
            push_output=$(git push --set-upstream origin "$current_branch" 2>&1) || push_exit=$?
        fi
        if [ "$push_exit" -ne 0 ]; then
            echo "${RED}Error:${NC} git push failed" >&2
            printf '%s\\n' "$push_output" >&2
            return 1
        fi
    fi
    echo "${GREEN}✓${NC} Pushed to origin/${current_branch}"

    local mr_url
    mr_url=$(printf '%s\\n' "$push_output" | grep -oE 'https?://[^ ]+' | grep -iE '(merge|pull)' | head -n 1)
    if [ -n "$mr_url" ]; then
        echo ""
        echo "${BLUE}📎 Create Merge Request:${NC}"
        echo "   ${BOLD}${mr_url}${NC}"
    fi

    echo ""
    echo "${BOLD}${GREEN}✨ Done!${NC}"
}
"""

_COMMIT_TAIL = """
    echo ""
    echo "${YELLOW}[3/3]${NC} 📦 Committing staged changes..."
    if ! git commit -m "$commit_message"; then
        echo "${RED}Error:${NC} git commit failed" >&2
        return 1
    fi
    echo "${GREEN}✓${NC} Changes committed"

    echo ""
    echo "${BOLD}${GREEN}✨ Done!${NC}"
}
"""

# ── Per-kind layout ─────────────────────────────────────────────


_LAYOUT = {
    "push": {
        "title": "Git Push with AI Commit Message",
        "headline": "🚀 Git Push with AI Commit Message",
        "scope": "git changes",
        "steps": "4",
        "segments": (_HEADER, _PUSH_CHECKS, _BANNER, _MESSAGE_SOURCE, _PUSH_TAIL),
        "capture": _PUSH_CAPTURE,
    },
    "commit": {
        "title": "Git Commit with AI Message",
        "headline": "📝 Git Commit with AI Message",
        "scope": "staged changes",
        "steps": "3",
        "segments": (_HEADER, _COMMIT_CHECKS, _BANNER, _MESSAGE_SOURCE, _COMMIT_TAIL),
        "capture": _COMMIT_CAPTURE,
    },
}


def _fill(template: str, values: dict[str, str]) -> str:
    for key, value in values.items():
        template = template.replace("{{" + key + "}}", value)
    return template


# ── Public API ──────────────────────────────────────────────────


def render(
    kind: str,
    alias_name: str,
    provider: ProviderConfig,
    model: str | None,
    settings: Settings | None = None,
) -> str:
    """Render the workflow function for ``kind`` ("push" or "commit").

    Args:
        kind: Workflow variant.
        alias_name: Shell function name to define.
        provider: Provider whose CLI generates the message.
        model: Model id, or None for the provider default.
        settings: Limits and timeouts; defaults when omitted.

    Returns:
        Function text ending in a newline, starting with its comment header.
    """
    if kind not in _LAYOUT:
        raise ValueError(f"Unknown workflow kind '{kind}' (expected one of {', '.join(KINDS)})")
    settings = settings or Settings()
    layout = _LAYOUT[kind]

    values = {
        # capture first: it carries tokens of its own
        "capture": layout["capture"],
        "alias": alias_name,
        "title": layout["title"],
        "headline": layout["headline"],
        "scope": layout["scope"],
        "steps": layout["steps"],
        "provider_name": provider.display_name,
        "model_label": model or "default",
        "binary": provider.binary_name,
        "command": build_command(provider, model, "prompt"),
        "prompt": shell_prompt(kind),
        "diff_limit": str(settings.diff_line_limit),
        "untracked_limit": str(settings.untracked_line_limit),
        "gen_timeout": str(settings.generation_timeout),
        "editor": settings.editor_fallback,
        "rule": RULE,
    }
    return _fill("".join(layout["segments"]), values)


def render_banner(provider: ProviderConfig, model: str | None, generated_at: datetime | None = None) -> str:
    """Comment banner written above a pair of workflow functions."""
    stamp = (generated_at or datetime.now(UTC)).isoformat()
    return (
        f"# {RULE}\n"
        f"# AI Git Aliases - Added by @lvmk/quick-alias\n"
        f"# Provider: {provider.display_name} | Model: {model or 'default'}\n"
        f"# Generated: {stamp}\n"
        f"# {RULE}\n"
    )


def render_install_block(
    push_alias: str,
    commit_alias: str,
    provider: ProviderConfig,
    model: str | None,
    settings: Settings | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Banner plus both workflow functions, ready to append to a profile."""
    return (
        "\n"
        + render_banner(provider, model, generated_at)
        + "\n"
        + render("push", push_alias, provider, model, settings)
        + "\n"
        + render("commit", commit_alias, provider, model, settings)
    )


def render_reload_alias(name: str, profile_path: str) -> str:
    """Banner plus ``alias name="source <profile>"``."""
    return (
        "\n"
        f"# {RULE}\n"
        f"# Shell Reload Alias - Added by @lvmk/quick-alias\n"
        f"# {RULE}\n"
        f'alias {name}="source {profile_path}"\n'
    )
