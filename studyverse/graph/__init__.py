"""LangGraph workflow and state for quiz generation.

Nothing is re-exported here: the workflow imports the quiz writer nodes,
which import the state module, so importing the workflow from the package
would be circular. Import from the modules directly:

    from studyverse.graph.state import QuizGenerationState, create_initial_state
    from studyverse.graph.workflow import compile_workflow, create_quiz_workflow
"""
