"""
Extraction of CUE definitions from JSON Schema.

The schema is walked repeatedly: a $ref can be seen before the schema it
refers to, and whether that schema needs a definition of its own is only
known once the whole document has been visited. Each pass starts from an
empty StructBuilder; the information about which locations need
definitions, and where those definitions live, carries over between
passes. The walk ends when a pass finds nothing new.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
from dataclasses import dataclass
from typing import Any

from ..cue_ast.astutil import add_imports
from ..cue_ast.nodes import Attribute, BadExpr, Expr, File, Package
from ..errors import ErrorList, ExtractError, SchemaError, StructBuilderError
from ..utils import quote_string
from ..values.json_value import JSONValue
from ..values.kind import ALL_TYPES, Kind, kind_name
from ..values.path import Path
from .config import ExtractConfig
from .constraints.generic import constraint_add_definitions
from .pointer import lookup_json_pointer
from .ref import DEFAULT_ROOT_ID, default_map, default_map_ref, default_map_url, is_absolute_uri, parse_root_ref, without_fragment
from .schema_info import SchemaInfo
from .state import State
from .structbuilder import StructBuilder
from .version import Version

logger = logging.getLogger(__name__)

# Passes after which extraction gives up. Two are enough in practice.
MAX_PASSES = 10


@dataclass
class DefinedSchema:
    """A schema that has been given a name."""

    # Empty for schemas in the package being generated
    import_path: str
    # Location of the schema within its package
    path: Path
    # The schema itself; None while it is only known through references
    schema: Expr | None = None
    comment: str | None = None


class Decoder:
    def __init__(self, cfg: ExtractConfig, root: JSONValue, root_id: str):
        self.cfg = cfg
        self.errors = ErrorList()
        # The whole document, as opposed to the location of the schemas in it
        self.root = root
        self.root_id = root_id
        # The single schema being extracted, if there is one
        self.root_schema: JSONValue | None = None

        # Locations that need a definition. None marks a location that has
        # been referred to but not visited yet.
        self.def_for_value: dict[tuple, DefinedSchema | None] = {}
        # Number of None entries in def_for_value
        self.dangling_refs = 0
        # Named schemas by canonical URI
        self.defs: dict[str, DefinedSchema] = {}
        # Nodes declaring each known $id, without fragment
        self.id_nodes: dict[str, JSONValue] = {}

        self.builder = StructBuilder()
        self.need_another_pass = False
        self.pass_ = 0

        if cfg.map_ref is not None:
            self.map_ref = cfg.map_ref
        else:
            self.map_ref = functools.partial(
                default_map_ref, map_fn=cfg.map or default_map, map_url_fn=cfg.map_url or default_map_url
            )

    def errf(self, n: JSONValue | None, message: str) -> Expr:
        self.add_error(n.pos if n is not None else "", message)
        return BadExpr(message=message)

    def add_error(self, pos: str, message: str) -> None:
        self.errors.add(SchemaError(pos, message))

    def ensure_definition(self, n: JSONValue) -> None:
        """Make sure that n will be given a definition."""
        if n.path not in self.def_for_value:
            self.def_for_value[n.path] = None
            self.dangling_refs += 1

    def new_definition(self, loc_id: str, import_path: str, path: Path) -> DefinedSchema:
        def_ = DefinedSchema(import_path=import_path, path=path)
        self.defs[loc_id] = def_
        return def_

    def decode(self, v: JSONValue) -> File | None:
        defs_root: JSONValue | None = None
        if self.cfg.root:
            try:
                root_tokens = parse_root_ref(self.cfg.root)
            except ValueError as e:
                self.errf(None, f"invalid root value {self.cfg.root!r}: {e}")
                return None
            key = lookup_json_pointer(v.data, root_tokens)
            root = v.lookup(key) if key is not None else None
            if root is None:
                if not self.cfg.allow_non_existent_root:
                    self.errf(v, f"root value at path {self.cfg.root} does not exist")
                    return None
                root = JSONValue({}, tuple(root_tokens), v.source)
            if self.cfg.single_root:
                v = root
            else:
                if root.kind != Kind.STRUCT:
                    self.errf(root, f"value at path {self.cfg.root} must be struct containing definitions but is actually {kind_name(root.kind)}")
                    return None
                defs_root = root
        if defs_root is None:
            self.root_schema = v

        root_info = SchemaInfo()
        # Nodes that are referred to but not part of the regular traversal
        extra_schemas: list[JSONValue] = []
        # The last pass in which extra schemas were added
        base_pass = 0

        self.pass_ = 0
        while True:
            if self.pass_ > MAX_PASSES:
                self.errf(v, "internal error: too many passes without resolution")
                return None
            logger.debug("extraction pass %d", self.pass_)

            self.id_nodes.setdefault(without_fragment(self.root_id), self.root)
            root = State(
                self,
                self.root,
                info=SchemaInfo(schema_version=self.cfg.default_version, id=self.root_id),
                is_root=True,
            )

            if defs_root is not None:
                constraint_add_definitions("schemas", defs_root, root)
            else:

                def mark_root(s: State) -> None:
                    # The schema may be below the top of the document.
                    s.is_root = True

                expr, state = root.schema_state(v, ALL_TYPES, mark_root)
                if state.allowed_types == Kind.BOTTOM:
                    self.errf(v, "constraints are not possible to satisfy")
                    return None
                if not self.builder.put(Path(), expr, state.comment()):
                    self.errf(v, "duplicate definition at root")
                    return None
                root_info = state

            if self.dangling_refs > 0 and self.pass_ == base_pass + 1:
                # Still dangling after a second look: something refers to a
                # node that is not itself a schema location. Visit those
                # nodes as schemas in their own right.
                for path, def_ in list(self.def_for_value.items()):
                    if def_ is not None:
                        continue
                    n = self.root.lookup(path)
                    if n is None:
                        raise RuntimeError(f"no node for dangling reference at {path}")
                    extra_schemas.append(n)
                    base_pass = self.pass_
            for n in extra_schemas:
                root.schema(n)

            if not self.need_another_pass and self.dangling_refs == 0:
                break

            self.builder = StructBuilder()
            for def_ in self.defs.values():
                def_.schema = None
            self.need_another_pass = False
            self.pass_ += 1

        if self.cfg.define_schema is not None:
            for def_ in self.defs.values():
                if def_.schema is not None and def_.import_path:
                    self.cfg.define_schema(def_.import_path, def_.path, def_.schema, def_.comment)

        try:
            f = self.builder.syntax()
        except StructBuilderError as e:
            self.errf(v, f"cannot build final syntax: {e}")
            return None

        preamble: list = []
        if self.cfg.pkg_name:
            preamble.append(Package(name=self.cfg.pkg_name))
        if root_info.schema_version_present:
            preamble.append(Attribute(text=f"@jsonschema(schema={quote_string(str(root_info.schema_version))})"))
        if root_info.deprecated:
            preamble.append(Attribute(text="@deprecated()"))
        f.decls = preamble + f.decls
        return add_imports(f)


def extract(data: Any, cfg: ExtractConfig | None = None) -> File:
    """Extract CUE definitions from a JSON Schema.

    data holds the decoded JSON or YAML document. The result is a CUE file
    holding the root schema, if there is one, and a definition for every
    schema under $defs or definitions and every schema referred to by a $ref.

    Raises ExtractError listing every problem found.
    """
    cfg = dataclasses.replace(cfg) if cfg is not None else ExtractConfig()
    if cfg.default_version == Version.UNKNOWN:
        cfg.default_version = Version.DRAFT2020_12
    if cfg.strict:
        cfg.strict_keywords = True
        cfg.strict_features = True
    if cfg.root and cfg.map is None:
        # Schemas directly under the root location are named like those in $defs.
        try:
            root_tokens = parse_root_ref(cfg.root)
        except ValueError:
            root_tokens = []
        cfg.map = functools.partial(default_map, root_tokens=root_tokens)
    root_id = cfg.id or DEFAULT_ROOT_ID
    if not is_absolute_uri(root_id):
        raise ExtractError([SchemaError("", f"id {root_id!r} is not an absolute URI")])

    root = data if isinstance(data, JSONValue) else JSONValue(data, (), cfg.source)
    d = Decoder(cfg, root, root_id)
    f = d.decode(root)
    if d.errors:
        raise ExtractError(d.errors.errors)
    logger.debug("extracted %d definitions in %d passes", len(d.defs), d.pass_ + 1)
    return f
