"""
Command resolution: walk the declaration tree along the leading tokens.

Matching is exact (name or alias); fuzzy matching only happens later, when the
parser reports an unknown command.
"""
from .commands import FoundCommand


def scope_of(node, root, /):
    """
    Options that apply to node: root (global) options first, then node's own.
    """
    if node is root:
        return root.options
    return root.options + node.options


def resolve(root, tokens, /):
    """
    Find the deepest command reachable by consuming a prefix of tokens.

    behavior
    - starting at root, each token must equal a child's name or one of its
      aliases to descend; the first token matching no child stops the walk
      (flag-looking tokens never match).
    - full_name is root.name followed by the consumed tokens, as typed.

    returns
    - tuple[FoundCommand, list[str]]: the resolved command and the tokens left
      for the parser.
    """
    tokens = list(tokens)
    node = root
    index = 0
    for index, token in enumerate(tokens):
        if (child := node.child(token)) is None:
            break
        node = child
    else:
        index = len(tokens)

    found = FoundCommand(
        node,
        " ".join([root.name, *tokens[:index]]),
        scope_of(node, root),
        root,
    )
    return found, tokens[index:]


__all__ = (
    "resolve",
    "scope_of",
)
