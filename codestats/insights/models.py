"""
Data models for code stats insights.

Definitions are frozen so that two resolution passes over the same settings
compare equal field by field. Chart models serialize with the camelCase keys
the host's chart renderer expects.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class InsightDefinition(BaseModel):
    """One code stats insight from the user/org settings cascade."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    repository: Optional[str] = None
    other_threshold: Optional[float] = Field(default=None, alias="otherThreshold")

    # Full search query from the first version of the extension, where users
    # wrote the query by hand. Newer insights derive it from `repository`.
    query: Optional[str] = None


class LanguageStat(BaseModel):
    """Total lines of one language in a search result."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    total_lines: int = Field(alias="totalLines", ge=0)


class ChartSeriesEntry(BaseModel):
    """One pie slice."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    total_lines: int = Field(alias="totalLines")
    fill_color: str = Field(alias="fillColor")
    link_url: str = Field(alias="linkURL")


class PieChart(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: List[ChartSeriesEntry]
    data_key: str = Field(default="totalLines", alias="dataKey")
    name_key: str = Field(default="name", alias="nameKey")
    fill_key: str = Field(default="fillColor", alias="fillKey")
    link_url_key: str = Field(default="linkURL", alias="linkURLKey")


class PieChartContent(BaseModel):
    chart: Literal["pie"] = "pie"
    pies: List[PieChart]


class ChartView(BaseModel):
    """Declarative view handed back to the host for rendering."""

    title: str
    content: List[PieChartContent]

    def to_dict(self) -> dict:
        """Convert the view to the host's wire format."""
        return self.model_dump(by_alias=True)


class RenderingContext(BaseModel):
    """
    What the host knows about where a view is being rendered.

    `directory_uri` is set when the view is shown next to a directory
    (e.g. "git://github.com/sourcegraph/sourcegraph?main#cmd"), and empty on
    the global insights page.
    """

    directory_uri: Optional[str] = None
