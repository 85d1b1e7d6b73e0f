"""Tool description and argument schemas advertised to MCP clients.

The Cognitive State Model text is guidance for the calling agent. The
server records whatever states the agent reports and checks none of them.
"""

TOOL_DESCRIPTION = """\
A tool for rigorous, state-driven problem-solving using the **Cognitive State Model (CSM) v2**. \
The model turns thinking from a linear sequence into a self-correcting cognitive workflow with \
conditional deep-dive capabilities. Use the CSM as the default framework for complex tasks and \
scale its application to the problem's ambiguity and complexity.

When to use this tool:
- For any complex, ambiguous, or multi-faceted problem.
- When a request requires investigation, planning, or diagnosis.
- When a solution needs to be built and validated through iterative steps.
- When a simple plan proves insufficient and needs brainstorming, inspiration, or risk analysis.
- When a novel architecture or solution must be designed from first principles.
- **When NOT to use this tool**: simple, single-step, unambiguous requests. Bypass the CSM there.

Key features:
- **Decomposition**: break large problems into manageable components (`DECOMPOSE`).
- **Dialectic method**: a mandatory self-challenge step (`CHALLENGE`) against cognitive bias.
- **State-driven workflow**: `branchId` formally tracks the current cognitive state.
- **Structured synthesis**: insights merge into a unified plan (`SYNTHESIZE`).
- **Conditional expansion**: the `EXPAND` meta-state runs deep sub-protocols for inspiration, \
foundational synthesis and hurdle analysis.
- **Iterative learning**: every loop ends with `REFLECT`.

CSM Protocol v2:

**1.0 Initial assessment**
    1.1 Analyze the request's complexity.
        1.1.1 Simple and single-step: bypass the CSM and execute directly.
        1.1.2 Complex or ambiguous: enter `DECOMPOSE`.

**2.0 `state: DECOMPOSE`**
    2.1 Set `branchId: 'state: DECOMPOSE'`.
    2.2 Identify the fundamental, separable components or hypotheses.
    2.3 List them, numbered, in `thought`.

**3.0 `state: EXPLORE(component)`**
    3.1 For each component, branch from the `DECOMPOSE` thought.
    3.2 Set `branchId: 'state: EXPLORE(component_name)'`.
    3.3 Write a specific, actionable plan to investigate that component.
    3.4 Immediately move to `CHALLENGE` for the same component.

**4.0 `state: CHALLENGE(component)`**
    4.1 Branch from the `EXPLORE` thought just completed.
    4.2 Set `branchId: 'state: CHALLENGE(component_name)'`.
    4.3 Actively seek flaws in the plan: question assumptions, weigh alternatives, find edge cases.
    4.4 Decision gate:
        4.4.1 Minor, correctable flaws: go to `SYNTHESIZE` (6.0).
        4.4.2 Fundamental flaws, no viable ideas, or a paradigm shift needed: go to `EXPAND` (5.0).

**5.0 `state: EXPAND(component)`: foundational solution sub-protocol**
Run these four steps in order, one thought each, all with \
`branchId: 'state: EXPAND(component_name)'`.
    5.1 Inspiration gathering and deconstruction: collect diverse inspirations (mainstream \
research, cross-disciplinary analogies, underexplored paradigms) and reduce each to its core \
mechanism. Output: a palette of first principles.
    5.2 Foundational synthesis: combine those principles, plus ab-initio principles from the \
problem's requirements, into 1-3 novel foundational concept candidates.
    5.3 Critical hurdle analysis: take the most promising candidate, list every significant \
technical, logical or implementation hurdle, and give each a concrete, justified resolution path. \
If any major hurdle lacks a high-confidence resolution, reject the candidate and return to 5.2 \
(or 5.1 in severe cases).
    5.4 Finalized foundation: present the validated concept and how it resolves the component \
that triggered `EXPAND`. It becomes the primary input of `SYNTHESIZE`.

**6.0 `state: SYNTHESIZE`**
    6.1 Set `branchId: 'state: SYNTHESIZE'`.
    6.2 From `CHALLENGE` (4.4.1), fold in the minor corrections; from `EXPAND` (4.4.2), build \
on the validated foundational concept from 5.4.
    6.3 Write the new, synthesized plan.
    6.4 Mark it with `isRevision: true` and `revisesThought`.
    6.5 Return to 3.0 for the next component, or move to `EXECUTE` when all are done.

**7.0 `state: EXECUTE`**
    7.1 Set `branchId: 'state: EXECUTE'`.
    7.2 Consolidate all synthesized plans into a final action plan.
    7.3 Carry it out with tool calls or the final user response.

**8.0 `state: REFLECT`**
    8.1 Set `branchId: 'state: REFLECT'` after execution.
    8.2 Assess the outcome: success, surprises, lessons.
    8.3 This closes the CSM loop.

Parameters:
- `thought`: the reasoning statement for the current state.
- `nextThoughtNeeded`: `true` for every state except the final `REFLECT`.
- `thoughtNumber`: sequential identifier of this step.
- `totalThoughts`: estimated steps for the whole loop; adjust freely.
- `branchId`: the formal state identifier, `'state: STATENAME(optional_component)'`.
- `branchFromThought`: links `EXPLORE`, `CHALLENGE` or `EXPAND` back to its origin thought.
- `isRevision`: `true` in `SYNTHESIZE` to mark a revised plan.
- `revisesThought`: with `isRevision`, the `thoughtNumber` of the plan being revised.

You should:
1. Start every complex task in `DECOMPOSE`.
2. Follow every `EXPLORE` plan with a `CHALLENGE`.
3. Enter `EXPAND` and run all four of its steps when a `CHALLENGE` finds fundamental weaknesses.
4. Label every step with its state in `branchId`; all `EXPAND` steps share one `branchId`.
5. Integrate insights in `SYNTHESIZE`, centered on the validated concept after an `EXPAND`.
6. Not enter `EXECUTE` until every component is resolved.
7. End every loop with `REFLECT`.
8. Set `nextThoughtNeeded` to `false` only in the final `REFLECT`.
"""

THOUGHT_ARGUMENT_SCHEMAS = {
    "thought": {
        "type": "string",
        "description": "Your current thinking step, structured according to the CSM Protocol v2",
    },
    "nextThoughtNeeded": {
        "type": "boolean",
        "description": "Whether another thought step is needed to continue the CSM loop",
    },
    "thoughtNumber": {
        "type": "integer",
        "minimum": 1,
        "description": "Current thought number in the sequence",
    },
    "totalThoughts": {
        "type": "integer",
        "minimum": 1,
        "description": "Estimated total thoughts needed to complete the CSM loop",
    },
    "isRevision": {
        "type": "boolean",
        "description": "Must be `true` in the `SYNTHESIZE` state to mark plan revision",
    },
    "revisesThought": {
        "type": "integer",
        "minimum": 1,
        "description": "Which `EXPLORE` thought is being reconsidered by `SYNTHESIZE`",
    },
    "branchFromThought": {
        "type": "integer",
        "minimum": 1,
        "description": "Branching point for `EXPLORE`, `CHALLENGE`, or `EXPAND` states",
    },
    "branchId": {
        "type": "string",
        "description": (
            "The formal CSM state identifier, e.g., `'state: DECOMPOSE'` or "
            "`'state: EXPAND(database)'`"
        ),
    },
}
