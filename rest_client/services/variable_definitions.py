"""
File variable service.

Request documents declare variables on their own lines as ``@name = value``
and reference them as ``{{name}}``. This service finds declarations (for
go-to-definition) and substitutes references in request templates
(URL, headers, body).
"""

import re
from typing import Tuple, List

from ..schemas.execute import ExecuteRequest
from ..schemas.http import HttpRequest
from ..schemas.variables import DefinitionRange


# Pattern to match {{variable_name}} placeholders
VARIABLE_PATTERN = re.compile(r'\{\{(\w+)\}\}')

# Pattern to match "@name = value" declarations
VARIABLE_DEFINITION_PATTERN = re.compile(r'^\s*@([^\s=]+)\s*=\s*(.*?)\s*$')

_LINE_BREAK = re.compile(r'\r?\n')


def extract_variables(template: str) -> List[str]:
    """
    Extract all variable names from a template string.

    Args:
        template: String containing {{variable}} placeholders

    Returns:
        List of variable names found in the template

    Example:
        >>> extract_variables("Hello {{name}}, your id is {{id}}")
        ['name', 'id']
    """
    if not template:
        return []

    return VARIABLE_PATTERN.findall(template)


def substitute(template: str, variables: dict[str, str]) -> Tuple[str, List[str]]:
    """
    Replace variable placeholders in a template with their values.

    Args:
        template: String containing {{variable}} placeholders
        variables: Dictionary mapping variable names to their values

    Returns:
        Tuple of (substituted string, list of unmatched variable names)

    Example:
        >>> substitute("Hello {{name}}", {"name": "World"})
        ('Hello World', [])
        >>> substitute("Hello {{name}}", {})
        ('Hello {{name}}', ['name'])
    """
    if not template:
        return template, []

    unmatched: List[str] = []

    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        if var_name in variables:
            return variables[var_name]
        else:
            unmatched.append(var_name)
            return match.group(0)  # Keep original placeholder

    result = VARIABLE_PATTERN.sub(replace_match, template)
    return result, unmatched


def substitute_dict(data: dict[str, str], variables: dict[str, str]) -> Tuple[dict[str, str], List[str]]:
    """Replace variable placeholders in all values of a dictionary."""
    if not data:
        return data, []

    result = {}
    all_unmatched: List[str] = []

    for key, value in data.items():
        substituted_value, unmatched = substitute(value, variables)
        result[key] = substituted_value
        all_unmatched.extend(unmatched)

    return result, all_unmatched


def parse_variable_definitions(document: str) -> dict[str, str]:
    """
    Collect ``@name = value`` declarations from a document.

    Later declarations of the same name win.

    Example:
        >>> parse_variable_definitions("@host = example.com\\nGET https://{{host}}")
        {'host': 'example.com'}
    """
    variables: dict[str, str] = {}
    if not document:
        return variables

    for line in _LINE_BREAK.split(document):
        match = VARIABLE_DEFINITION_PATTERN.match(line)
        if match:
            variables[match.group(1)] = match.group(2)
    return variables


def find_definition_ranges(document: str, variable: str) -> List[DefinitionRange]:
    """
    Locate the declarations of ``variable`` in a document.

    Each range covers ``@name`` on its line (zero-based line and columns,
    end exclusive).
    """
    ranges: List[DefinitionRange] = []
    if not document or not variable:
        return ranges

    for index, line in enumerate(_LINE_BREAK.split(document)):
        match = VARIABLE_DEFINITION_PATTERN.match(line)
        if match and match.group(1) == variable:
            start = line.index(f"@{variable}")
            ranges.append(DefinitionRange(line=index, start=start, end=start + len(variable) + 1))
    return ranges


def build_http_request(payload: ExecuteRequest) -> Tuple[HttpRequest, List[str]]:
    """
    Turn an execute payload into an HttpRequest, substituting file variables.

    The body as authored (before substitution) is kept as ``raw_body``.

    Returns:
        Tuple of (request, list of warning messages for undefined variables)
    """
    variables = parse_variable_definitions(payload.document or "")
    warnings: List[str] = []

    url, url_unmatched = substitute(payload.url, variables)
    if url_unmatched:
        warnings.extend([f"Undefined variable in URL: {{{{{v}}}}}" for v in url_unmatched])

    headers, headers_unmatched = substitute_dict(payload.headers, variables)
    if headers_unmatched:
        warnings.extend([f"Undefined variable in headers: {{{{{v}}}}}" for v in headers_unmatched])

    body = payload.body
    if body:
        body, body_unmatched = substitute(body, variables)
        if body_unmatched:
            warnings.extend([f"Undefined variable in body: {{{{{v}}}}}" for v in body_unmatched])

    request = HttpRequest(
        method=payload.method.upper(),
        url=url,
        headers=dict(headers),
        body=body,
        raw_body=payload.body,
        request_variable_cache_key=payload.request_variable_cache_key,
    )
    return request, warnings
