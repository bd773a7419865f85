"""Tree-sitter powered Go declaration parser."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from ..errors import ParseError
from ..models import Position
from .base import (
    FieldSpec,
    FuncDecl,
    MethodSpec,
    ParsedFile,
    ReceiverSpec,
    Signature,
    SourceParser,
    TypeDecl,
    ValueDecl,
)

GO_LANGUAGE = Language(tree_sitter_go.language())

_SOURCE_SUFFIX = ".go"
_TEST_SUFFIX = "_test.go"

# Older grammar releases used different names for interface elements.
_METHOD_ELEMS = {"method_elem", "method_spec"}
_TYPE_ELEMS = {"type_elem", "constraint_elem", "interface_type_name"}
_EMBEDDABLE = {"type_identifier", "qualified_type", "generic_type"}

_LITERAL_KINDS = {
    "int_literal": "int",
    "float_literal": "float",
    "imaginary_literal": "imaginary",
    "rune_literal": "rune",
    "interpreted_string_literal": "string",
    "raw_string_literal": "string",
    "true": "bool",
    "false": "bool",
}


def is_go_source(name: str) -> bool:
    """Return True for non-test Go source file names."""
    return name.endswith(_SOURCE_SUFFIX) and not name.endswith(_TEST_SUFFIX)


class GoParser(SourceParser):
    """Extracts top-level Go declarations using the tree-sitter Go grammar."""

    def __init__(self) -> None:
        # tree-sitter parsers are not safe to share between threads.
        self._local = threading.local()

    def supports(self, path: str) -> bool:
        return is_go_source(path)

    def parse(self, content: bytes, path: str) -> ParsedFile:
        try:
            content.decode("utf-8")
        except UnicodeDecodeError as exc:
            line = content.count(b"\n", 0, exc.start) + 1
            column = exc.start - content.rfind(b"\n", 0, exc.start)
            raise ParseError(path, line, column, "invalid UTF-8 encoding") from exc
        tree = self._parser().parse(content)
        root = tree.root_node
        if root.has_error:
            broken = _first_error(root)
            line, column = _point(broken or root)
            detail = f"missing {broken.type}" if broken is not None and broken.is_missing else "syntax error"
            raise ParseError(path, line, column, detail)
        return _FileReader(content, path).read(root)

    def _parser(self) -> Parser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = Parser(GO_LANGUAGE)
            self._local.parser = parser
        return parser


def _first_error(root: Node) -> Optional[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def _point(node: Node) -> Tuple[int, int]:
    row, column = node.start_point[0], node.start_point[1]
    return row + 1, column + 1


def _named(node: Node) -> Iterator[Node]:
    for child in node.named_children:
        if child.type != "comment":
            yield child


class _FileReader:
    """Turns one Go syntax tree into declaration records."""

    def __init__(self, source: bytes, path: str) -> None:
        self._source = source
        self._path = path
        self._type_names: Dict[str, str] = {}

    def read(self, root: Node) -> ParsedFile:
        parsed = ParsedFile(path=self._path, package="")
        for node in _named(root):
            if node.type == "package_clause":
                parsed.package = self._package_name(node)
            elif node.type == "function_declaration":
                parsed.decls.append(self._function(node))
            elif node.type == "method_declaration":
                parsed.decls.append(self._method(node))
            elif node.type == "type_declaration":
                parsed.decls.extend(self._types(node))
            elif node.type == "const_declaration":
                parsed.decls.extend(self._values(node, "const"))
            elif node.type == "var_declaration":
                parsed.decls.extend(self._values(node, "var"))
        return parsed

    # ------------------------------------------------------------------
    # Declarations

    def _package_name(self, node: Node) -> str:
        for child in _named(node):
            return self._text(child)
        return ""

    def _function(self, node: Node) -> FuncDecl:
        name = self._text(node.child_by_field_name("name"))
        type_params = node.child_by_field_name("type_parameters")
        with self._type_scope(self._type_param_names(type_params)):
            signature = self._signature(node, type_params)
        return FuncDecl(name=name, position=self._position(node), signature=signature)

    def _method(self, node: Node) -> FuncDecl:
        name = self._text(node.child_by_field_name("name"))
        receiver = node.child_by_field_name("receiver")
        with self._type_scope(self._receiver_type_args(receiver)):
            signature = self._signature(node, None)
        return FuncDecl(
            name=name,
            position=self._position(node),
            signature=signature,
            receiver=self._receiver(receiver),
        )

    def _receiver_type(self, params: Optional[Node]) -> Tuple[Optional[Node], bool]:
        if params is None:
            return None, False
        for decl in _named(params):
            type_node = decl.child_by_field_name("type")
            pointer = False
            while type_node is not None and type_node.type in {"pointer_type", "parenthesized_type"}:
                if type_node.type == "pointer_type":
                    pointer = True
                type_node = next(_named(type_node), None)
            return type_node, pointer
        return None, False

    def _receiver(self, params: Optional[Node]) -> Optional[ReceiverSpec]:
        type_node, pointer = self._receiver_type(params)
        if type_node is None:
            return None
        if type_node.type == "generic_type":
            type_node = type_node.child_by_field_name("type")
        return ReceiverSpec(type_name=self._text(type_node), pointer=pointer)

    def _receiver_type_args(self, params: Optional[Node]) -> List[str]:
        type_node, _ = self._receiver_type(params)
        if type_node is None or type_node.type != "generic_type":
            return []
        args = type_node.child_by_field_name("type_arguments")
        names: List[str] = []
        for arg in _named(args) if args is not None else ():
            while arg is not None and arg.type in {"type_elem", "type_constraint"}:
                arg = next(_named(arg), None)
            names.append(self._text(arg))
        return names

    def _types(self, node: Node) -> List[TypeDecl]:
        decls: List[TypeDecl] = []
        for spec in _named(node):
            if spec.type not in {"type_spec", "type_alias"}:
                continue
            params_node = spec.child_by_field_name("type_parameters")
            with self._type_scope(self._type_param_names(params_node)):
                decls.append(self._type_spec(spec, self._type_params(params_node)))
        return decls

    def _type_spec(self, spec: Node, type_params: str) -> TypeDecl:
        name = self._text(spec.child_by_field_name("name"))
        type_node = spec.child_by_field_name("type")
        position = self._position(spec)
        if spec.type == "type_alias":
            return TypeDecl(
                name=name,
                position=position,
                underlying=f"= {self._type(type_node)}",
                type_params=type_params,
                alias=True,
            )
        if type_node is not None and type_node.type == "struct_type":
            return TypeDecl(
                name=name,
                position=position,
                underlying="struct",
                type_params=type_params,
                fields=tuple(self._struct_fields(type_node)),
            )
        if type_node is not None and type_node.type == "interface_type":
            methods, embeds, terms = self._interface_elems(type_node)
            underlying = "interface"
            if terms:
                underlying = "interface{" + "; ".join(terms) + "}"
            return TypeDecl(
                name=name,
                position=position,
                underlying=underlying,
                type_params=type_params,
                methods=tuple(methods),
                embeds=tuple(embeds),
            )
        return TypeDecl(
            name=name,
            position=position,
            underlying=self._type(type_node),
            type_params=type_params,
        )

    @contextmanager
    def _type_scope(self, names: Sequence[str]) -> Iterator[None]:
        # Type parameters are renamed by position so that renaming one is not a change.
        saved = self._type_names
        self._type_names = {name: f"${index}" for index, name in enumerate(names) if name}
        try:
            yield
        finally:
            self._type_names = saved

    def _type_param_names(self, node: Optional[Node]) -> List[str]:
        names: List[str] = []
        if node is None:
            return names
        for decl in _named(node):
            if decl.type == "type_parameter_declaration":
                names.extend(self._text(name) for name in decl.children_by_field_name("name"))
        return names


    def _values(self, node: Node, kind: str) -> List[ValueDecl]:
        decls: List[ValueDecl] = []
        previous: Tuple[Optional[Node], Sequence[Node]] = (None, ())
        for spec in self._value_specs(node):
            names = spec.children_by_field_name("name")
            type_node = spec.child_by_field_name("type")
            value_node = spec.child_by_field_name("value")
            values: Sequence[Node] = list(_named(value_node)) if value_node is not None else ()
            if kind == "const" and type_node is None and not values:
                # Implicit repetition of the previous spec inside a const group.
                type_node, values = previous
            elif kind == "const":
                previous = (type_node, values)
            for index, name_node in enumerate(names):
                if type_node is not None:
                    declared = self._type(type_node)
                elif kind == "const":
                    value = values[index] if index < len(values) else None
                    declared = _untyped(value)
                else:
                    declared = ""
                decls.append(
                    ValueDecl(
                        kind=kind,
                        name=self._text(name_node),
                        type=declared,
                        position=self._position(name_node),
                    )
                )
        return decls

    @staticmethod
    def _value_specs(node: Node) -> Iterator[Node]:
        for child in _named(node):
            if child.type in {"const_spec", "var_spec"}:
                yield child
            elif child.type == "var_spec_list":
                for spec in _named(child):
                    if spec.type == "var_spec":
                        yield spec

    # ------------------------------------------------------------------
    # Members

    def _struct_fields(self, struct_node: Node) -> Iterator[FieldSpec]:
        for field_list in _named(struct_node):
            if field_list.type != "field_declaration_list":
                continue
            for decl in _named(field_list):
                if decl.type != "field_declaration":
                    continue
                type_node = decl.child_by_field_name("type")
                names = decl.children_by_field_name("name")
                if names:
                    rendered = self._type(type_node)
                    for name_node in names:
                        yield FieldSpec(
                            name=self._text(name_node),
                            type=rendered,
                            position=self._position(name_node),
                        )
                    continue
                pointer = any(child.type == "*" for child in decl.children)
                rendered = ("*" if pointer else "") + self._type(type_node)
                yield FieldSpec(
                    name=self._embedded_name(type_node),
                    type=rendered,
                    position=self._position(decl),
                    embedded=True,
                )

    def _interface_elems(
        self, iface: Node
    ) -> Tuple[List[MethodSpec], List[FieldSpec], List[str]]:
        methods: List[MethodSpec] = []
        embeds: List[FieldSpec] = []
        terms: List[str] = []
        for elem in _named(iface):
            if elem.type in _METHOD_ELEMS:
                methods.append(
                    MethodSpec(
                        name=self._text(elem.child_by_field_name("name")),
                        signature=self._signature(elem, None),
                        position=self._position(elem),
                    )
                )
            elif elem.type in _TYPE_ELEMS:
                parts = list(_named(elem))
                if elem.type == "interface_type_name" or (
                    len(parts) == 1 and parts[0].type in _EMBEDDABLE
                ):
                    target = parts[0] if parts and elem.type != "interface_type_name" else elem
                    embeds.append(
                        FieldSpec(
                            name=self._embedded_name(target),
                            type=self._type(target),
                            position=self._position(elem),
                            embedded=True,
                        )
                    )
                else:
                    terms.append(" | ".join(self._type(part) for part in parts))
            else:
                terms.append(self._type(elem))
        return methods, embeds, terms

    def _embedded_name(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        if node.type == "qualified_type":
            return self._text(node.child_by_field_name("name"))
        if node.type == "generic_type":
            return self._embedded_name(node.child_by_field_name("type"))
        if node.type == "interface_type_name":
            inner = next(_named(node), None)
            return self._embedded_name(inner) if inner is not None else self._text(node)
        return self._text(node)

    # ------------------------------------------------------------------
    # Types and signatures

    def _signature(self, node: Node, type_params: Optional[Node]) -> Signature:
        params, variadic = self._param_types(node.child_by_field_name("parameters"))
        result = node.child_by_field_name("result")
        if result is None:
            results: List[str] = []
        elif result.type == "parameter_list":
            results, _ = self._param_types(result)
        else:
            results = [self._type(result)]
        return Signature(
            params=tuple(params),
            results=tuple(results),
            variadic=variadic,
            type_params=self._type_params(type_params),
        )

    def _param_types(self, params: Optional[Node]) -> Tuple[List[str], bool]:
        types: List[str] = []
        variadic = False
        if params is None:
            return types, variadic
        for decl in _named(params):
            type_node = decl.child_by_field_name("type")
            if decl.type == "variadic_parameter_declaration":
                types.append("..." + self._type(type_node))
                variadic = True
                continue
            if decl.type != "parameter_declaration":
                continue
            rendered = self._type(type_node)
            count = max(1, len(decl.children_by_field_name("name")))
            types.extend([rendered] * count)
        return types, variadic

    def _type_params(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        params: List[str] = []
        for decl in _named(node):
            if decl.type != "type_parameter_declaration":
                continue
            constraint = self._type(decl.child_by_field_name("type"))
            for name_node in decl.children_by_field_name("name"):
                name = self._text(name_node)
                params.append(f"{self._type_names.get(name, name)} {constraint}")
        return "[" + ", ".join(params) + "]" if params else ""

    def _type(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        kind = node.type
        if kind == "type_identifier":
            name = self._text(node)
            return self._type_names.get(name, name)
        if kind in {"identifier", "field_identifier", "package_identifier"}:
            return self._text(node)
        if kind == "qualified_type":
            package = self._text(node.child_by_field_name("package"))
            return f"{package}.{self._text(node.child_by_field_name('name'))}"
        if kind == "pointer_type":
            return "*" + self._type(next(_named(node), None))
        if kind == "parenthesized_type":
            return self._type(next(_named(node), None))
        if kind == "negated_type":
            return "~" + self._type(next(_named(node), None))
        if kind == "slice_type":
            return "[]" + self._type(node.child_by_field_name("element"))
        if kind == "array_type":
            length = self._expression(node.child_by_field_name("length"))
            return f"[{length}]" + self._type(node.child_by_field_name("element"))
        if kind == "implicit_length_array_type":
            return "[...]" + self._type(node.child_by_field_name("element"))
        if kind == "map_type":
            key = self._type(node.child_by_field_name("key"))
            return f"map[{key}]" + self._type(node.child_by_field_name("value"))
        if kind == "channel_type":
            return self._channel(node)
        if kind == "function_type":
            return self._signature(node, None).render()
        if kind == "generic_type":
            base = self._type(node.child_by_field_name("type"))
            args = node.child_by_field_name("type_arguments")
            rendered = [self._type(arg) for arg in _named(args)] if args is not None else []
            return f"{base}[{', '.join(rendered)}]"
        if kind in {"type_elem", "type_constraint", "constraint_elem", "interface_type_name"}:
            return " | ".join(self._type(part) for part in _named(node))
        if kind == "struct_type":
            fields = [
                (f"{spec.name} {spec.type}" if not spec.embedded else spec.type)
                for spec in self._struct_fields(node)
            ]
            return "struct{" + "; ".join(fields) + "}"
        if kind == "interface_type":
            methods, embeds, terms = self._interface_elems(node)
            elems = [method.signature.render(method.name) for method in methods]
            elems.extend(embed.type for embed in embeds)
            elems.extend(terms)
            return "interface{" + "; ".join(elems) + "}"
        return self._expression(node)

    def _channel(self, node: Node) -> str:
        tokens = [child.type for child in node.children if not child.is_named]
        value = self._type(node.child_by_field_name("value"))
        if tokens[:2] == ["<-", "chan"]:
            return f"<-chan {value}"
        if tokens[:2] == ["chan", "<-"]:
            return f"chan<- {value}"
        return f"chan {value}"

    def _expression(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return "".join(self._text(leaf) for leaf in _leaves(node))

    # ------------------------------------------------------------------
    # Helpers

    def _text(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def _position(self, node: Node) -> Position:
        line, column = _point(node)
        return Position(path=self._path, line=line, column=column)


def _leaves(node: Node) -> Iterable[Node]:
    if node.type == "comment":
        return
    if node.child_count == 0 or node.type in _LITERAL_KINDS:
        yield node
        return
    for child in node.children:
        yield from _leaves(child)


def _untyped(value: Optional[Node]) -> str:
    while value is not None and value.type in {"unary_expression", "parenthesized_expression"}:
        value = value.child_by_field_name("operand") or next(_named(value), None)
    if value is None:
        return "untyped"
    if value.type in _LITERAL_KINDS:
        return f"untyped {_LITERAL_KINDS[value.type]}"
    if value.type == "iota" or value.text == b"iota":
        return "untyped int"
    return "untyped"


__all__ = ["GO_LANGUAGE", "GoParser", "is_go_source"]
