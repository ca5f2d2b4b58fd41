"""Price series models."""

from pydantic import BaseModel, ConfigDict, model_validator


class RawQuoteSeries(BaseModel):
    """上游返回的原始行情序列, 各字段可能含空值."""

    timestamps: list[int]
    opens: list[float | None]
    highs: list[float | None]
    lows: list[float | None]
    closes: list[float | None]
    volumes: list[int | float | None]
    adj_closes: list[float | None] | None = None

    @model_validator(mode="after")
    def check_lengths(self) -> "RawQuoteSeries":
        """所有字段长度必须与timestamps一致."""
        expected = len(self.timestamps)
        fields = {
            "opens": self.opens,
            "highs": self.highs,
            "lows": self.lows,
            "closes": self.closes,
            "volumes": self.volumes,
        }
        if self.adj_closes is not None:
            fields["adj_closes"] = self.adj_closes
        for name, values in fields.items():
            if len(values) != expected:
                raise ValueError(f"{name} has {len(values)} entries, expected {expected}")
        return self


class NormalizedSeries(BaseModel):
    """规范化后的日线序列, 创建后不可变."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    dates: tuple[str, ...] = ()
    opens: tuple[float, ...] = ()
    highs: tuple[float, ...] = ()
    lows: tuple[float, ...] = ()
    closes: tuple[float, ...] = ()
    adj_closes: tuple[float, ...] = ()
    volumes: tuple[int, ...] = ()

    @model_validator(mode="after")
    def check_lengths(self) -> "NormalizedSeries":
        expected = len(self.dates)
        for name in ("opens", "highs", "lows", "closes", "adj_closes", "volumes"):
            if len(getattr(self, name)) != expected:
                raise ValueError(f"{name} length does not match dates length {expected}")
        return self

    def __len__(self) -> int:
        return len(self.dates)

    @property
    def last_close(self) -> float:
        """最新收盘价, 空序列返回0.0."""
        return self.closes[-1] if self.closes else 0.0
