"""Page compilation: match sensor keys against compiled templates.

Keys are sorted before matching so that the resulting page order only
depends on the store contents and the template order, never on the order
in which sensors were discovered. A key is claimed by the first template
that matches it; later templates never see it again.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Union

from core.templates import CompiledTemplate, SensorTemplate

logger = logging.getLogger(__name__)

# Only single digit placeholders {1}..{9} are substituted
PLACEHOLDER_RE = re.compile(r"\{([1-9])\}")


@dataclass(frozen=True)
class SensorPage:
    sensor_key: str
    display_name: str
    template: SensorTemplate


@dataclass(frozen=True)
class TimePage:
    label: str


Page = Union[SensorPage, TimePage]


def resolve_display_name(name_template: str, match) -> str:
    """Fill {1}..{9} in name_template with the match's capture groups.

    Placeholders for groups the pattern doesn't have are left as they are;
    groups that didn't participate in the match become empty.
    """
    group_count = len(match.groups())

    def _sub(m):
        idx = int(m.group(1))
        if idx > group_count:
            return m.group(0)
        return match.group(idx) or ""

    return PLACEHOLDER_RE.sub(_sub, name_template)


def build_pages(
    templates: Sequence[CompiledTemplate],
    snapshot: Mapping[str, str],
    time_page: Optional[str] = None,
) -> List[Page]:
    """Build the ordered page list for the current sensor snapshot.

    The result may be empty; deciding whether that is fatal is up to
    the caller.
    """
    keys = sorted(snapshot)
    claimed = set()
    pages: List[Page] = []

    for compiled in templates:
        base_name = compiled.template.base_name
        for key in keys:
            if key in claimed:
                continue
            match = compiled.match(key)
            if match is None:
                continue
            pages.append(SensorPage(key, resolve_display_name(base_name, match), compiled.template))
            claimed.add(key)

    if time_page:
        pages.append(TimePage(time_page))

    logger.debug("Built %d pages from %d sensor keys", len(pages), len(keys))
    return pages
