from __future__ import annotations

from pydantic import BaseModel, Field


class YahooChartMeta(BaseModel):
    symbol: str = ""
    regular_market_price: float | None = Field(default=None, alias="regularMarketPrice")
    chart_previous_close: float | None = Field(default=None, alias="chartPreviousClose")


class YahooChartResult(BaseModel):
    meta: YahooChartMeta | None = None


class YahooChart(BaseModel):
    result: list[YahooChartResult] | None = None


class YahooChartResponse(BaseModel):
    chart: YahooChart = Field(default_factory=YahooChart)


class KisOverseasPrice(BaseModel):
    rsym: str = ""
    zdiv: str = ""
    base: str = ""
    pvol: str = ""
    last: str = ""
    sign: str = ""
    diff: str = ""
    rate: str = ""
    tvol: str = ""
    tamt: str = ""
    ordy: str = ""


class KisProxyResponse(BaseModel):
    output: KisOverseasPrice = Field(default_factory=KisOverseasPrice)
    rt_cd: str = ""
    msg_cd: str = ""
    msg1: str = ""


class InvestingHtml(BaseModel):
    chart_info: str = ""


class InvestingChartResponse(BaseModel):
    html: InvestingHtml = Field(default_factory=InvestingHtml)
