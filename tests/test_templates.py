"""{{token}} substitution."""
from datetime import date

from services.correspondence_service import substitute_variables, template_tokens

TODAY = date(2025, 3, 14)


class TestSubstituteVariables:

     def test_simple_substitution(self):
          assert substitute_variables("Hello {{name}}", {"name": "Ana"}) == "Hello Ana"

     def test_unknown_token_left_verbatim(self):
          assert substitute_variables("Hello {{foo}}", {"name": "Ana"}) == "Hello {{foo}}"

     def test_builtins(self):
          text = substitute_variables("Lisboa, {{current_date}} ({{current_year}})", today=TODAY)
          assert text == "Lisboa, 2025-03-14 (2025)"

     def test_caller_overrides_builtin(self):
          assert substitute_variables("{{current_year}}", {"current_year": "1999"}, today=TODAY) == "1999"

     def test_braced_keys_accepted(self):
          assert substitute_variables("Rent: {{rent_amount}}", {"{{rent_amount}}": "1200.00"}) == "Rent: 1200.00"

     def test_repeated_tokens(self):
          assert substitute_variables("{{a}}-{{a}}-{{b}}", {"a": "1", "b": "2"}) == "1-1-2"

     def test_single_pass(self):
          # A substituted value is not scanned again
          assert substitute_variables("{{a}}", {"a": "{{b}}", "b": "x"}) == "{{b}}"

     def test_regex_metacharacters_are_literal(self):
          variables = {"a.b": "dot", "x+": "plus", "(y)": "paren"}
          assert substitute_variables("{{a.b}} {{axb}} {{x+}} {{(y)}}", variables) == "dot {{axb}} plus paren"

     def test_no_variables(self):
          assert substitute_variables("Plain text") == "Plain text"

     def test_values_are_stringified(self):
          assert substitute_variables("{{n}} months", {"n": 12}) == "12 months"

     def test_triple_braces(self):
          # the token is "{name" and the last brace is plain text
          assert substitute_variables("{{{name}}}", {"name": "Ana"}) == "{{{name}}}"
          assert substitute_variables("{{{name}}}", {"{name": "Ana"}) == "Ana}"
          assert template_tokens("{{{name}}}") == ["{name"]


def test_template_tokens_in_order():
     assert template_tokens("{{b}} {{a}} {{b}} {{current_date}}") == ["b", "a", "current_date"]
