#  -*- coding: utf-8 -*-
"""
Rich terminal display of verification failures.

Failures define their visual representation through a title and a content
renderable; ``Displayable`` wraps them in a styled panel driven by
``DisplaySettings``.
"""

from __future__ import annotations

import pandas

from abc import ABC, abstractmethod

from io import StringIO

from rich.markup import escape
from rich.text import Text
from rich.panel import Panel
from rich.console import Console, RenderableType
from rich.table import Table
from rich import box
from rich.align import Align

from .dto import DTO, DTOProperty


# ========== ========== ========== ========== ========== ==========
class DisplaySettings(DTO):
    """
    Configuration for terminal display formatting.

    All styling properties use Rich's style syntax, supporting colors,
    attributes (bold, italic) and combinations such as ``'bold red'``.

    Attributes
    ----------
    console_width : int
        Maximum console output width in characters. Default 150.
    property_style : str
        Style for property labels in forms. Default 'bold bright_yellow'.
    panel_border_style : str
        Style for panel borders. Default 'bright_cyan'.
    failure_border_style : str
        Style for the borders of failure panels. Default 'bright_red'.
    panel_box : str
        Box style name from rich.box. Default 'ROUNDED'.
    panel_title_align : str
        Panel title alignment. Default 'center'.
    table_index_style : str or None
        Style for table index column. Default None.
    table_header_style : str or None
        Style for table headers. Default 'bold bright_yellow'.
    table_spacing : int
        Column spacing in characters. Default 4.
    max_rows : int
        Rows shown before a table is truncated. Default 31.
    """

    console_width: int = DTOProperty(default=150, key='consoleWidth')
    property_style: str = DTOProperty(default='bold bright_yellow', key='propertyStyle')

    panel_border_style: str = DTOProperty(default='bright_cyan', key='panelBorderStyle')
    failure_border_style: str = DTOProperty(default='bright_red', key='failureBorderStyle')
    panel_box: str = DTOProperty(default='ROUNDED', key='panelBox')
    panel_title_align: str = DTOProperty(default='center', key='panelTitleAlign')

    table_index_style: str | None = DTOProperty(key='tableIndexStyle')
    table_header_style: str | None = DTOProperty(default='bold bright_yellow', key='tableHeaderStyle')
    table_spacing: int = DTOProperty(default=4, key='tableSpacing')
    max_rows: int = DTOProperty(default=31, key='maxRows')

    @panel_box.parser
    def panel_box(self, value: str) -> str:
        """Box style name, validated against rich.box"""
        if not isinstance(getattr(box, value, None), box.Box):
            raise ValueError(f"Unknown box style: {value}")

        return value

    @max_rows.parser
    def max_rows(self, value: int) -> int:

        if value < 3:
            raise ValueError(f"max_rows must be at least 3, given {value}")

        return value


class Displayable(ABC):
    """
    Abstract base for objects with Rich terminal display.

    Subclasses define content through ``_title()`` and ``_content()``; the
    base class handles panel styling and rendering. Integrates with Rich's
    protocol (``__rich__``) and renders to ANSI text.

    Attributes
    ----------
    display_settings : DisplaySettings
        Configuration for display formatting. Each instance gets its own
        settings unless one is assigned explicitly.
    """

    # ========== ========== ========== ========== ========== class attributes
    display_settings: DisplaySettings = DTOProperty(doc="Configuration for display formatting and styling.")

    @display_settings.default
    def display_settings(self):
        return DisplaySettings()

    # ========== ========== ========== ========== ========== special methods
    def __str__(self) -> str:
        return self.to_text()

    def __rich__(self) -> RenderableType:
        return self._display_panel()

    # ========== ========== ========== ========== ========== protected methods
    @abstractmethod
    def _title(self) -> Text:
        """
        Generate panel title.
        """
        ...

    @abstractmethod
    def _content(self) -> RenderableType:
        """
        Generate panel body content (str, Text, Table or any Rich renderable).
        """
        ...

    def _border_style(self) -> str:
        return self.display_settings.panel_border_style

    def _display_panel(self) -> Panel:
        """
        Create formatted panel with current settings.
        """
        return Panel(
            self._content(),
            title=self._title(),
            border_style=self._border_style(),
            title_align=self.display_settings.panel_title_align,
            expand=False,
            box=getattr(box, self.display_settings.panel_box)
        )

    # ========== ========== ========== ========== ========== public methods
    def format_as_form(self, data: dict[str, str] | pandas.Series) -> Table:
        """
        Format data as key-value form.

        Keys get ':' appended and use ``property_style``.
        """
        form = Table.grid(padding=(0, 4), expand=False)
        form.add_column(justify='left', style=self.display_settings.property_style)
        form.add_column(justify='left', style=None)

        for prop, value in data.items():
            form.add_row(f'{prop}:', value)

        return form

    def format_as_table(self,
                        frame: pandas.DataFrame,
                        show_index: bool = True,
                        align_header: str = 'center',
                        max_rows: int | None = None) -> Table:
        """
        Format DataFrame as Rich table.

        Parameters
        ----------
        frame : pandas.DataFrame
            Data to display.
        show_index : bool, optional
            Include index column. Default True.
        align_header : str, optional
            Header alignment. Default 'center'.
        max_rows : int, optional
            Max rows before truncation. Defaults to ``display_settings.max_rows``.

        Returns
        -------
        Table
            Formatted Rich Table.

        Notes
        -----
        Numeric columns are right-aligned, the others left-aligned. Past
        ``max_rows``, the first and last rows are shown around a '...' row.
        Cell values are escaped, so text such as JSON brackets is printed
        verbatim.
        """
        if max_rows is None:
            max_rows = self.display_settings.max_rows

        index_style = self.display_settings.table_index_style

        _frame = frame.reset_index() if show_index else frame.copy()

        columns = [str(column) for column in _frame.columns]

        table = Table.grid(padding=(0, self.display_settings.table_spacing), expand=False)

        for column in _frame.columns:

            if pandas.api.types.is_numeric_dtype(_frame[column]):
                table.add_column(justify='right')

            else:
                table.add_column(justify='left')

        table.add_row(*(Align(escape(col), align_header) for col in columns),
                      style=self.display_settings.table_header_style)

        __frame = _frame.astype(str)

        def add_row(values) -> None:

            cells = [escape(value) for value in values]

            if show_index:
                table.add_row(Text(values[0], style=index_style or ''), *cells[1:])
            else:
                table.add_row(*cells)

        if len(__frame) <= max_rows:
            for _, row in __frame.iterrows():
                add_row(list(row.values))

        else:
            n_rows: int = (max_rows - 1) // 2

            for _, row in __frame.head(n_rows).iterrows():
                add_row(list(row.values))

            table.add_row(*(Align.center('...') for _ in columns))

            for _, row in __frame.tail(n_rows).iterrows():
                add_row(list(row.values))

        return table

    def to_text(self) -> str:
        """
        Render the panel with ANSI color codes.
        """
        string_io = StringIO()
        console = Console(file=string_io,
                          force_terminal=True,
                          width=self.display_settings.console_width)

        console.print(self._display_panel())

        return string_io.getvalue()


__all__ = [
    'DisplaySettings',
    'Displayable',
]
