# errors.py
# =============================================================================
# 阶段校验错误定义。 / Stage validation errors.
#
# 纯 reducer 校验失败时抛出 StageValidationError，由状态机捕获并转为
# TransitionResult；记录与阶段均不变。
# / Pure reducers raise StageValidationError; the state machine catches it and
#   returns a TransitionResult, leaving record and stage untouched.
# =============================================================================

from __future__ import annotations


# -----------------------------------------------------------------------------
# 错误码 / Error codes
# -----------------------------------------------------------------------------
WRONG_STAGE = "WRONG_STAGE"
AT_FIRST_STAGE = "AT_FIRST_STAGE"
FRAMING_INCOMPLETE = "FRAMING_INCOMPLETE"
THRESHOLD_INVALID = "THRESHOLD_INVALID"
REVERSIBILITY_INVALID = "REVERSIBILITY_INVALID"
ALTERNATIVE_COUNT = "ALTERNATIVE_COUNT"
ALTERNATIVE_NAME_EMPTY = "ALTERNATIVE_NAME_EMPTY"
ALTERNATIVE_ID_DUPLICATE = "ALTERNATIVE_ID_DUPLICATE"
CRITERIA_COUNT = "CRITERIA_COUNT"
CRITERION_NAME_EMPTY = "CRITERION_NAME_EMPTY"
WEIGHT_INVALID = "WEIGHT_INVALID"
WEIGHT_SUM = "WEIGHT_SUM"
SCORE_OUT_OF_RANGE = "SCORE_OUT_OF_RANGE"
RANKING_UNAVAILABLE = "RANKING_UNAVAILABLE"
TOP_CHOICE_MISSING = "TOP_CHOICE_MISSING"
AMOUNT_INVALID = "AMOUNT_INVALID"
RANGE_INVALID = "RANGE_INVALID"
MOST_LIKELY_OUT_OF_RANGE = "MOST_LIKELY_OUT_OF_RANGE"
RISK_INCOMPLETE = "RISK_INCOMPLETE"
RISK_REQUIRED = "RISK_REQUIRED"
RISK_LIMIT = "RISK_LIMIT"


class StageValidationError(Exception):
    """阶段校验错误: 携带错误码与面向用户的说明。
    / Stage validation error carrying a code and a user-facing message.
    """

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}
