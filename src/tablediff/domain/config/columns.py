"""Column detection configuration model."""

from pydantic import BaseModel, Field


class ColumnsConfig(BaseModel):
    """Thresholds used by the column diff detector.

    Attributes:
        fuzzy_threshold: Minimum header similarity for a rename
        sampling_threshold: Minimum cell agreement ratio for a rename
        max_sample_rows: Number of data rows compared when sampling
    """

    fuzzy_threshold: float = Field(0.6, ge=0.0, le=1.0)
    sampling_threshold: float = Field(0.8, ge=0.0, le=1.0)
    max_sample_rows: int = Field(50, gt=0)
