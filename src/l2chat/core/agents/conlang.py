from typing import Annotated, Any, TypedDict

from langchain_core.messages import BaseMessage, SystemMessage
from langchain_openai import ChatOpenAI
from langgraph.graph import END, START, StateGraph
from langgraph.graph.message import add_messages
from langgraph.prebuilt import ToolNode, tools_condition


TOOL_GUIDELINES = """**Tool Usage Guidelines:**
Use tools for actual data operations, but be creative for examples and suggestions.

**Use tools when:**
- Users ask to retrieve stored lexicon data -> use get_lexicon
- Users ask to save new words to the lexicon -> use add_lexicon_entry
- Users ask to read existing files -> use read_file
- Users ask to save new files -> use add_file
- Users ask to analyze phonology of specific text -> use analyze_phonology
- Users ask to validate grammar of specific text -> use validate_grammar
- When you proposed a word definition and the user agrees ("Yes", "Add it", ...), call add_lexicon_entry with that word immediately.

**Do NOT use tools when:**
- Users ask for example words, translations, or creative suggestions -> provide these directly
- Users ask for made-up vocabulary or example sentences -> create these yourself
- Users ask for hypothetical language features -> describe and demonstrate them directly

Be flexible and creative when users ask for examples or suggestions.
"""


class AgentState(TypedDict):
    messages: Annotated[list[BaseMessage], add_messages]


def build_llm(model: str, api_key: str, base_url: str, temperature: float = 0.7) -> ChatOpenAI:
    return ChatOpenAI(
        model=model,
        api_key=api_key,
        base_url=base_url,
        temperature=temperature,
        streaming=True,
    )


def chatbot_factory(llm_with_tools):
    async def chatbot(state: AgentState):
        msgs = [SystemMessage(TOOL_GUIDELINES), *state["messages"]]
        ai_msg = await llm_with_tools.ainvoke(msgs)
        return {'messages': [ai_msg]}
    return chatbot


def build_agent(llm: ChatOpenAI, tools: list[Any]):
    """
    Chat model plus tool loop: the model may call tools, their results are
    fed back, and the graph ends once the model answers without tool calls.
    """
    chatbot = chatbot_factory(llm.bind_tools(tools))

    graph_builder = StateGraph(AgentState)
    graph_builder.add_node('chatbot', chatbot)
    graph_builder.add_node('tools', ToolNode(tools))

    graph_builder.add_edge(START, 'chatbot')
    graph_builder.add_conditional_edges('chatbot', tools_condition, {'tools': 'tools', END: END})
    graph_builder.add_edge('tools', 'chatbot')

    return graph_builder.compile(name="conlang_agent")
