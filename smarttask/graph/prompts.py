"""System prompts shared across nodes."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence, Tuple

from .modes import MODE_PROFILES


# ========== Planner Stage Prompt ==========
PLANNER_TEMPLATE = """For the given objective, come up with a simple step by step plan.
This plan should involve individual tasks, that if executed correctly will yield the correct answer. Do not add any superfluous steps.
The result of the final step should be the final answer. Make sure that each step has all the information needed - do not skip steps.

Mode: {mode}
- Decision mode: Analyze context to make decisions, with the FINAL step being to set pipeline variables using set_pipeline_variable tool
- Execution mode: Analyze context and execute actions, with the FINAL step being to execute shell commands using execute_command tool

Available tools for when information gathering or actions are needed:
{catalog}

IMPORTANT:
- Only use tool calls when you need to gather information or perform actions
- Reasoning, analysis, and planning steps should NOT require tool calls
- Use tools only when you need to: read files, get variables, execute commands, etc.
{final_step_rules}

Output only a JSON object with this structure:
{{
  "steps": ["step1 description", "step2 description", ...]
}}"""


# ========== Executor Stage Prompt ==========
EXECUTOR_TEMPLATE = """You are an execution agent. Your job is to execute the given step.

Current step: {step}
Mode: {mode}
Context: {context}

Available tools for when information gathering or actions are needed:
{catalog}

EXECUTION STRATEGY:
1. First determine if this step requires tool calls or is just reasoning/analysis
2. If the step is pure reasoning, analysis, or planning - respond with just your analysis
3. If the step requires gathering information or performing actions - use appropriate tools

WHEN TO USE TOOLS:
- Use tools when you need to: read files, get variables, execute commands, list directories, etc.
- Do NOT use tools for: reasoning, analysis, planning, decision-making based on existing context

MODE-SPECIFIC REQUIREMENTS:
{executor_rules}

Respond with ONE of these formats:

For reasoning/analysis steps:
{{
  "type": "reasoning",
  "result": "Your analysis or reasoning result"
}}

For tool-requiring steps:
{{
  "type": "tools",
  "tools": [
    {{"tool": "tool_name", "input": "tool_input"}}
  ]
}}"""


# ========== Replanner Stage Prompt ==========
REPLANNER_TEMPLATE = """You are a replanning agent. Your job is to analyze progress and decide whether to continue or complete the task.

CURRENT OBJECTIVE: {objective}
EXECUTION MODE: {mode}

PROGRESS ANALYSIS:
- Completed steps: {completed}
- Remaining planned steps: {remaining}
- Recent results: {recent}

COMPLETION STATUS ANALYSIS:
{analysis}

DECISION CRITERIA:
1. **COMPLETE THE TASK** if any of these conditions are met:
   - For DECISION mode: A pipeline variable has been successfully set
   - For EXECUTION mode: Required commands have been executed successfully
   - You have gathered sufficient information to answer the original objective
   - Recent steps show the main goal has been achieved
   - Continuing would add no meaningful value

2. **CONTINUE WITH NEW STEPS** only if:
   - Critical information is still missing for the objective
   - Essential actions have not been completed
   - The objective genuinely cannot be answered with current progress

MODE-SPECIFIC COMPLETION INDICATORS:
- Decision mode: Look for successful variable setting, decision making, or analysis completion
- Execution mode: Look for successful command execution or process completion

INSTRUCTIONS:
- Be decisive about completion - avoid unnecessary additional steps
- Focus on the CORE objective, not peripheral tasks
- If you can provide a meaningful answer based on completed work, do so
- Only add steps that are absolutely essential
- Never repeat steps that are already completed

Output ONLY a JSON object:

For completion:
{{
  "response": "Clear answer based on completed steps and current context"
}}

For continuation (use sparingly):
{{
  "action": {{
    "steps": ["essential_step_1", "essential_step_2"]
  }}
}}"""


def _dump_context(context: Dict[str, Any]) -> str:
    return json.dumps(context, indent=2, default=str)


def _mode_rules(attribute: str) -> str:
    return "\n".join(
        f"- For {profile.mode.value.capitalize()} mode: {getattr(profile, attribute)}"
        for profile in MODE_PROFILES.values()
    )


def build_planner_prompt(*, mode: str, catalog: str) -> str:
    return PLANNER_TEMPLATE.format(
        mode=mode,
        catalog=catalog,
        final_step_rules=_mode_rules("final_step_rule"),
    )


def build_planner_content(objective: str, context: Dict[str, Any]) -> str:
    """Human message carrying the objective and the run context."""
    return f"{objective}\n\nAvailable context: {_dump_context(context)}"


def build_executor_prompt(*, step: str, mode: str, context: Dict[str, Any], catalog: str) -> str:
    return EXECUTOR_TEMPLATE.format(
        step=step,
        mode=mode,
        context=_dump_context(context),
        catalog=catalog,
        executor_rules=_mode_rules("executor_rule"),
    )


def format_recent_steps(past_steps: Sequence[Tuple[str, str]], last: int = 2) -> str:
    return "; ".join(f'"{step}" → "{outcome}"' for step, outcome in list(past_steps)[-last:])


def build_replanner_prompt(
    *,
    objective: str,
    mode: str,
    plan: List[str],
    past_steps: Sequence[Tuple[str, str]],
    analysis: str,
) -> str:
    return REPLANNER_TEMPLATE.format(
        objective=objective,
        mode=mode,
        completed=len(past_steps),
        remaining=len(plan),
        recent=format_recent_steps(past_steps),
        analysis=analysis,
    )
