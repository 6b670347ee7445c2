"""
Semantic Extraction
===================
Builds a compact semantic summary (imports, exports, functions, classes and
local dependencies) from raw source text.

Python sources are parsed with the ast module. JavaScript, JSX, TypeScript
and TSX sources are parsed with tree-sitter grammars; only top-level
declarations are summarised. Extraction never raises: on any failure an
empty summary is returned.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import tree_sitter_javascript
import tree_sitter_typescript
from loguru import logger
from tree_sitter import Language, Node, Parser

from editflow.utils.paths import detect_language

if TYPE_CHECKING:
    from editflow.pipeline.context import FileRecord


@dataclass
class ImportInfo:
    source: str
    specifiers: List[str] = field(default_factory=list)


@dataclass
class ExportInfo:
    name: str
    kind: str


@dataclass
class FunctionInfo:
    name: str
    params: List[str]
    line: int


@dataclass
class ClassInfo:
    name: str
    methods: List[str]
    line: int


@dataclass
class SemanticSummary:
    """Symbols extracted from one source file."""

    imports: List[ImportInfo] = field(default_factory=list)
    exports: List[ExportInfo] = field(default_factory=list)
    functions: List[FunctionInfo] = field(default_factory=list)
    classes: List[ClassInfo] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.imports or self.exports or self.functions or self.classes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imports": [{"source": i.source, "specifiers": list(i.specifiers)} for i in self.imports],
            "exports": [{"name": e.name, "type": e.kind} for e in self.exports],
            "functions": [{"name": f.name, "params": list(f.params), "line": f.line} for f in self.functions],
            "classes": [{"name": c.name, "methods": list(c.methods), "line": c.line} for c in self.classes],
            "dependencies": list(self.dependencies),
        }


# ============================================================
# Tree-sitter grammars
# ============================================================

_GRAMMARS = {
    "javascript": tree_sitter_javascript.language,
    "jsx": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}

_FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
_FUNCTION_VALUES = {"arrow_function", "function_expression", "function", "generator_function"}
_CLASS_DECLARATIONS = {"class_declaration", "abstract_class_declaration"}
_METHOD_NODES = {"method_definition", "method_signature", "abstract_method_signature"}
_VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}

_EXPORT_KINDS = {
    "function_declaration": "function",
    "generator_function_declaration": "function",
    "class_declaration": "class",
    "abstract_class_declaration": "class",
    "interface_declaration": "interface",
    "type_alias_declaration": "type",
    "enum_declaration": "enum",
}


@lru_cache(maxsize=None)
def _get_parser(language: str) -> Parser:
    return Parser(Language(_GRAMMARS[language]()))


def _node_text(node: Node) -> str:
    return node.text.decode("utf-8") if isinstance(node.text, bytes) else node.text


def _string_value(node: Node) -> str:
    return _node_text(node)[1:-1]


def _line(node: Node) -> int:
    return node.start_point[0] + 1  # tree-sitter rows are 0-indexed


def _is_relative(source: str) -> bool:
    return source.startswith(".")


def _param_name(node: Node) -> Optional[str]:
    if node.type in ("required_parameter", "optional_parameter"):
        pattern = node.child_by_field_name("pattern")
        return _param_name(pattern) if pattern is not None else None
    if node.type == "assignment_pattern":
        left = node.child_by_field_name("left")
        return _param_name(left) if left is not None else None
    if node.type == "rest_pattern":
        return _node_text(node).lstrip(".").split(":")[0].strip()
    if node.type == "comment":
        return None
    return _node_text(node)


def _function_params(node: Node) -> List[str]:
    single = node.child_by_field_name("parameter")
    if single is not None:
        return [_node_text(single)]
    parameters = node.child_by_field_name("parameters")
    if parameters is None:
        return []
    names = [_param_name(child) for child in parameters.named_children]
    return [name for name in names if name]


def _class_methods(node: Node) -> List[str]:
    body = node.child_by_field_name("body")
    if body is None:
        return []
    methods = []
    for member in body.named_children:
        if member.type not in _METHOD_NODES:
            continue
        name = member.child_by_field_name("name")
        if name is not None and _node_text(name) != "constructor":
            methods.append(_node_text(name))
    return methods


def _import_specifiers(node: Node) -> List[str]:
    specifiers: List[str] = []
    for child in node.named_children:
        if child.type != "import_clause":
            continue
        for part in child.named_children:
            if part.type == "identifier":
                specifiers.append(_node_text(part))
            elif part.type == "namespace_import":
                specifiers.extend(_node_text(n) for n in part.named_children if n.type == "identifier")
            elif part.type == "named_imports":
                for spec in part.named_children:
                    if spec.type != "import_specifier":
                        continue
                    alias = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                    specifiers.append(_node_text(alias))
    return specifiers


def _require_sources(node: Node) -> List[str]:
    """Module names passed to require() anywhere in the tree."""
    sources: List[str] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "call_expression":
            callee = current.child_by_field_name("function")
            arguments = current.child_by_field_name("arguments")
            if callee is not None and _node_text(callee) == "require" and arguments is not None:
                first = arguments.named_children[:1]
                if first and first[0].type == "string":
                    sources.append(_string_value(first[0]))
        stack.extend(reversed(current.children))
    return sources


class SemanticExtractor:
    """Language-aware semantic summary builder."""

    def parse_file(self, file: "FileRecord") -> SemanticSummary:
        """Summarize a file record; returns an empty summary on any failure."""
        if not file.content:
            return SemanticSummary()

        language = file.language or detect_language(file.path)
        try:
            if language == "python":
                return self._parse_python(file.content)
            if language in _GRAMMARS:
                return self._parse_script(file.content, language)
        except Exception as e:
            logger.debug(f"Semantic extraction failed for {file.path}: {e}")
        return SemanticSummary()

    def _parse_python(self, source: str) -> SemanticSummary:
        summary = SemanticSummary()
        tree = ast.parse(source)

        for node in tree.body:
            if isinstance(node, ast.Import):
                for alias in node.names:
                    summary.imports.append(ImportInfo(alias.name, [alias.asname or alias.name]))
            elif isinstance(node, ast.ImportFrom):
                module = "." * node.level + (node.module or "")
                names = [f"{a.name} as {a.asname}" if a.asname else a.name for a in node.names]
                summary.imports.append(ImportInfo(module, names))
                if node.level > 0:
                    summary.dependencies.append(module)
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                params = [a.arg for a in node.args.posonlyargs + node.args.args + node.args.kwonlyargs]
                summary.functions.append(FunctionInfo(node.name, params, node.lineno))
                if not node.name.startswith("_"):
                    summary.exports.append(ExportInfo(node.name, "function"))
            elif isinstance(node, ast.ClassDef):
                methods = [
                    item.name for item in node.body
                    if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef))
                ]
                summary.classes.append(ClassInfo(node.name, methods, node.lineno))
                if not node.name.startswith("_"):
                    summary.exports.append(ExportInfo(node.name, "class"))

        return summary

    def _parse_script(self, source: str, language: str) -> SemanticSummary:
        summary = SemanticSummary()
        root = _get_parser(language).parse(source.encode("utf-8")).root_node

        for statement in root.named_children:
            if statement.type == "import_statement":
                src = statement.child_by_field_name("source")
                if src is not None:
                    summary.imports.append(ImportInfo(_string_value(src), _import_specifiers(statement)))
            elif statement.type == "export_statement":
                self._collect_export(statement, summary)
            else:
                self._collect_declaration(statement, summary)

        for src in _require_sources(root):
            summary.imports.append(ImportInfo(src, []))

        # dedupe, keep order
        summary.dependencies = list(dict.fromkeys(i.source for i in summary.imports if _is_relative(i.source)))
        return summary

    def _collect_declaration(self, node: Node, summary: SemanticSummary) -> List[str]:
        """Record functions and classes declared by node; returns the declared names."""
        if node.type in _FUNCTION_DECLARATIONS:
            name = node.child_by_field_name("name")
            if name is None:
                return []
            summary.functions.append(FunctionInfo(_node_text(name), _function_params(node), _line(node)))
            return [_node_text(name)]

        if node.type in _CLASS_DECLARATIONS:
            name = node.child_by_field_name("name")
            if name is None:
                return []
            summary.classes.append(ClassInfo(_node_text(name), _class_methods(node), _line(node)))
            return [_node_text(name)]

        if node.type in _VARIABLE_DECLARATIONS:
            names = []
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name = declarator.child_by_field_name("name")
                value = declarator.child_by_field_name("value")
                if name is None:
                    continue
                names.append(_node_text(name))
                if value is not None and value.type in _FUNCTION_VALUES:
                    summary.functions.append(FunctionInfo(_node_text(name), _function_params(value), _line(declarator)))
            return names

        name = node.child_by_field_name("name")
        if node.type in _EXPORT_KINDS and name is not None:
            return [_node_text(name)]
        return []

    def _collect_export(self, node: Node, summary: SemanticSummary) -> None:
        is_default = any(child.type == "default" for child in node.children)

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            names = self._collect_declaration(declaration, summary)
            if declaration.type in _VARIABLE_DECLARATIONS:
                kind = _node_text(declaration.children[0]) if declaration.children else "const"
            else:
                kind = _EXPORT_KINDS.get(declaration.type, "export")
            if not is_default:
                summary.exports.extend(ExportInfo(name, kind) for name in names)

        for child in node.named_children:
            if child.type != "export_clause":
                continue
            for spec in child.named_children:
                if spec.type != "export_specifier":
                    continue
                exported = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                summary.exports.append(ExportInfo(_node_text(exported), "export"))

        src = node.child_by_field_name("source")
        if src is not None:
            summary.imports.append(ImportInfo(_string_value(src), []))

        if is_default:
            summary.exports.append(ExportInfo("default", "default"))
