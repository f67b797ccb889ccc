"""
Prompt construction for the three loop phases.

Each phase rebuilds a fresh ``[system, user]`` message pair; nothing is
carried between calls except what is written into these prompts.
"""

from typing import Optional, Sequence

RESULT_SEPARATOR = "\n\n---\n\n"

REASONING_TEMPLATE = """You are an AI assistant that needs to analyze a user request and create a plan to solve it.

User Request: {request}
{context}
Your task is to:
1. Understand what the user is asking for
2. Identify what information or actions you need to take
3. Plan which tools (if any) would be helpful
4. Provide a clear reasoning of your approach

Available tools:
{tools}

Respond with your reasoning and plan. Be specific about:
- What you understand the user wants
- What tools you would use and why
- What information you expect to gather
- Any potential challenges or considerations"""

EXECUTION_TEMPLATE = """Based on the reasoning below, execute the necessary tools to gather information or perform actions.

Reasoning: {plan}

Original User Request: {request}

Available tools:
{tools}

Your task is to:
1. Review the reasoning and identify which tools need to be called
2. Call the appropriate tools with the correct parameters
3. Gather all information needed to answer the user's request

Use tools proactively based on the reasoning."""

EVALUATION_TEMPLATE = """You are evaluating whether a task has been completed successfully.

Original User Request: {request}

Initial Reasoning: {plan}

Tool Results: {results}

Your task is to:
1. Review the original request and what was planned
2. Check whether the tool results provide sufficient information
3. Decide whether the task is complete or more work is needed
4. If complete, give a thorough final response to the user
5. If not complete, explain which additional steps are needed
6. If the task cannot be completed with the available tools, explain why and give a final response

Start your answer with "Task Evaluation: Complete" when the task is done.
If you are done or cannot continue, clearly state so with **DONE**."""


def format_tool_summary(summary: str) -> str:
    return summary or "(no tools available)"


def build_reasoning_messages(
    request: str,
    tool_summary: str,
    previous_results: Optional[Sequence[str]] = None,
) -> list[dict]:
    """Planning prompt: request, accumulated tool results, tool summary."""
    context = ""
    if previous_results:
        context = "\nContext: Previous tool results: " + "\n\n".join(previous_results) + "\n"
    system = REASONING_TEMPLATE.format(
        request=request,
        context=context,
        tools=format_tool_summary(tool_summary),
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": request},
    ]


def build_execution_messages(plan: str, request: str, tool_summary: str) -> list[dict]:
    """Execution prompt: plan, request, tool summary."""
    system = EXECUTION_TEMPLATE.format(
        plan=plan,
        request=request,
        tools=format_tool_summary(tool_summary),
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": f"Execute tools based on this reasoning: {plan}"},
    ]


def build_evaluation_messages(
    request: str, plan: str, iteration_results: Sequence[str]
) -> list[dict]:
    """Evaluation prompt: request, plan, this iteration's tool results."""
    system = EVALUATION_TEMPLATE.format(
        request=request,
        plan=plan,
        results=RESULT_SEPARATOR.join(iteration_results),
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": f"Evaluate if this task is complete: {request}"},
    ]
