"""Registry of special forms.

Maps names to handlers that receive their arguments unevaluated. The session
binds each one in the base environment wrapped in a SpecialForm, so evaluated
code sees them as ordinary (shadowable) bindings.
"""

from tidyeval.evaluation.special_forms.access_forms import dollar_form
from tidyeval.evaluation.special_forms.assign_form import assign_form
from tidyeval.evaluation.special_forms.capture_forms import (
    enexpr_form,
    enexprs_form,
    enquo_form,
    enquos_form,
    missing_form,
)
from tidyeval.evaluation.special_forms.control_forms import and_form, block_form, if_form, or_form, paren_form
from tidyeval.evaluation.special_forms.env_forms import current_env_form, global_env_form
from tidyeval.evaluation.special_forms.eval_form import eval_form, eval_tidy_form
from tidyeval.evaluation.special_forms.function_form import function_form
from tidyeval.evaluation.special_forms.quote_forms import (
    expr_form,
    exprs_form,
    quo_form,
    quos_form,
    quote_form,
    tilde_form,
)

SPECIAL_FORMS = {
    "quote": quote_form,
    "expr": expr_form,
    "quo": quo_form,
    "exprs": exprs_form,
    "quos": quos_form,
    "~": tilde_form,
    "enexpr": enexpr_form,
    "enquo": enquo_form,
    "enexprs": enexprs_form,
    "enquos": enquos_form,
    "missing": missing_form,
    "function": function_form,
    "if": if_form,
    "{": block_form,
    "(": paren_form,
    "&&": and_form,
    "||": or_form,
    "<-": assign_form,
    "=": assign_form,
    "$": dollar_form,
    "current_env": current_env_form,
    "global_env": global_env_form,
    "eval": eval_form,
    "eval_tidy": eval_tidy_form,
}
