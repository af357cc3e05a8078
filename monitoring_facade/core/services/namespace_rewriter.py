"""
Namespace scoping for query expressions.

Each monitoring backend isolates namespaces with its own expression syntax, so
rewriting is looked up per backend kind in a mapping built at startup and
handed to the monitoring service.
"""

import re
from typing import Callable, Dict, List, Mapping

from ..ports.exceptions import RewriteError


RewriteFn = Callable[[str, str], str]

PROMETHEUS_BACKEND = "prometheus"
NAMESPACE_LABEL = "namespace"

# DNS-1123 label, the format Kubernetes enforces for namespace names
_NAMESPACE_NAME = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
_MAX_NAMESPACE_LENGTH = 63

_STRING = r'"(?:[^"\\]|\\.)*"|\'(?:[^\'\\]|\\.)*\'|`[^`]*`'

_TOKENS = re.compile(
    rf"""
    (?P<string>{_STRING})
    | (?P<braces>\{{(?:[^{{}}"'`]|{_STRING})*\}})
    | (?P<range>\[[^\[\]]*\])
    | (?P<number>[0-9][0-9a-zA-Z_.]*)
    | (?P<ident>[a-zA-Z_:][a-zA-Z0-9_:]*)
    | (?P<space>\s+)
    | (?P<other>.)
    """,
    re.VERBOSE | re.DOTALL
)

_MATCHER = re.compile(
    rf"""
    \s*(?P<name>[a-zA-Z_][a-zA-Z0-9_]*|"(?:[^"\\]|\\.)*")
    \s*(?P<op>=~|!~|!=|=)
    \s*(?P<value>{_STRING})
    \s*(?:,|$)
    """,
    re.VERBOSE | re.DOTALL
)

_KEYWORDS = {"and", "or", "unless", "bool", "offset", "atan2", "inf", "nan"}
_GROUPING = {"by", "without", "on", "ignoring", "group_left", "group_right"}
_AGGREGATORS = {
    "sum", "min", "max", "avg", "group", "stddev", "stdvar", "count",
    "count_values", "bottomk", "topk", "quantile", "limitk", "limit_ratio"
}
_UNBALANCED = set("\"'`{}[]")


def _tokenize(expr: str) -> List[tuple]:
    tokens = []
    for match in _TOKENS.finditer(expr):
        kind = match.lastgroup
        text = match.group()
        if kind == "other" and text in _UNBALANCED:
            raise RewriteError(expr, "", f"unbalanced '{text}' at offset {match.start()}")
        tokens.append((kind, text))
    return tokens


def _next_significant(tokens: List[tuple], index: int) -> int:
    """Index of the next non-whitespace token after ``index``, or -1."""
    for i in range(index + 1, len(tokens)):
        if tokens[i][0] != "space":
            return i
    return -1


def _scope_matchers(expr: str, braces: str, namespace: str) -> str:
    body = braces[1:-1]
    matchers = []
    pos = 0
    while pos < len(body):
        if not body[pos:].strip():
            break
        match = _MATCHER.match(body, pos)
        if match is None or match.end() == pos:
            raise RewriteError(expr, namespace, f"invalid label matchers '{braces}'")
        name = match.group("name").strip('"')
        if name != NAMESPACE_LABEL:
            matchers.append(f"{match.group('name')}{match.group('op')}{match.group('value')}")
        pos = match.end()

    matchers.append(f'{NAMESPACE_LABEL}="{namespace}"')
    return "{" + ",".join(matchers) + "}"


def rewrite_prometheus_namespace(expr: str, namespace: str) -> str:
    """
    Restrict every vector selector in a PromQL expression to one namespace.

    Existing ``namespace`` matchers are replaced, so a caller cannot widen the
    scope by naming another namespace in the expression.

    Raises:
        RewriteError: If the namespace name is invalid or the expression cannot be parsed
    """
    if len(namespace) > _MAX_NAMESPACE_LENGTH or not _NAMESPACE_NAME.match(namespace):
        raise RewriteError(expr, namespace, "invalid namespace name")
    if not expr or not expr.strip():
        raise RewriteError(expr, namespace, "empty expression")

    try:
        tokens = _tokenize(expr)
    except RewriteError as e:
        raise RewriteError(expr, namespace, e.reason)

    output = []
    consumed = set()
    i = 0
    while i < len(tokens):
        kind, text = tokens[i]

        if i in consumed:
            i += 1
            continue

        if kind == "ident":
            nxt = _next_significant(tokens, i)
            next_text = tokens[nxt][1] if nxt >= 0 else ""

            word = text.lower()
            if word in _GROUPING:
                # Copy the label list of a grouping clause verbatim
                output.append(text)
                if next_text == "(":
                    close = next(
                        (j for j in range(nxt, len(tokens)) if tokens[j][1] == ")"),
                        -1
                    )
                    if close < 0:
                        raise RewriteError(expr, namespace, f"unterminated '{text}' clause")
                    output.extend(t[1] for t in tokens[i + 1:close + 1])
                    i = close + 1
                    continue
                i += 1
                continue

            is_call = next_text == "("
            is_aggregation = word in _AGGREGATORS and (next_text == "(" or next_text.lower() in ("by", "without"))
            if word in _KEYWORDS or is_call or is_aggregation:
                output.append(text)
                i += 1
                continue

            # Metric name, with or without a label block
            if nxt >= 0 and tokens[nxt][0] == "braces":
                output.append(text)
                output.extend(t[1] for t in tokens[i + 1:nxt])
                output.append(_scope_matchers(expr, tokens[nxt][1], namespace))
                i = nxt + 1
                continue
            output.append(f'{text}{{{NAMESPACE_LABEL}="{namespace}"}}')
            i += 1
            continue

        if kind == "braces":
            output.append(_scope_matchers(expr, text, namespace))
        else:
            output.append(text)
        i += 1

    return "".join(output)


def build_namespace_rewriters() -> Dict[str, RewriteFn]:
    """Build the backend kind -> rewrite function mapping used at startup."""
    return {
        PROMETHEUS_BACKEND: rewrite_prometheus_namespace,
    }


def scope_expression(
    rewriters: Mapping[str, RewriteFn],
    backend: str,
    expr: str,
    namespace: str
) -> str:
    """
    Scope an expression to a namespace using the rewriter registered for ``backend``.
    An empty namespace returns the expression untouched.

    Raises:
        RewriteError: If no rewriter is registered or the rewrite fails
    """
    if not namespace:
        return expr

    rewrite = rewriters.get(backend)
    if rewrite is None:
        raise RewriteError(expr, namespace, f"no namespace rewriter registered for backend '{backend}'")
    return rewrite(expr, namespace)
