"""
Test suite for the CPL semantic analyzer.

Tests cover:
- Symbol resolution and scoping
- Initialization tracking
- Statement context checks
- Error detection and reporting under both error policies

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from cpl.config import CompilerOptions
from cpl.lexer import Lexer
from cpl.parser import Parser
from cpl.analyzer import SemanticAnalyzer, SymbolTable, SymbolKind, ScopeKind, SemanticError
from cpl.analyzer.errors import SEMANTIC_ERROR_CODES
from cpl.lexer.tokens import SourceLocation, Token, TokenType
from cpl.parser import Grouping, Identifier, Literal, PrintStatement


class AnalyzerTestCase(unittest.TestCase):
    """Helpers shared by the analyzer tests."""

    def _analyze_code(self, code: str, recover: bool = False):
        """Helper to analyze a code snippet."""
        options = CompilerOptions(filename="test.cpl", recover=recover)
        tokens = Lexer(code, options.filename).tokenize()
        parsed = Parser(tokens, options).parse()
        self.assertFalse(parsed.has_errors(), f"Unexpected syntax errors: {[str(e) for e in parsed.errors]}")
        return SemanticAnalyzer(options).analyze(parsed.statements)

    def _assert_ok(self, code: str):
        result = self._analyze_code(code)
        self.assertFalse(result.has_errors(), f"Unexpected errors: {[str(e) for e in result.errors]}")
        return result

    def _codes(self, code: str, recover: bool = False):
        return [e.code for e in self._analyze_code(code, recover).errors]


class TestSemanticAnalyzer(AnalyzerTestCase):
    """Test cases for the semantic analyzer."""

    def test_basic_variable_declaration(self):
        result = self._assert_ok("let x = 42; let y = x + 1; print y;")

        x = result.symbol_table.global_scope.lookup_symbol_local("x")
        self.assertIsNotNone(x)
        self.assertEqual(x.kind, SymbolKind.VARIABLE)
        self.assertTrue(x.is_initialized)

    def test_undefined_variable(self):
        result = self._analyze_code("print x;")

        self.assertEqual(len(result.errors), 1)
        error = result.errors[0]
        self.assertEqual(error.code, "S010")
        self.assertEqual(str(error), "[line 1:column 7]: Undefined variable 'x'.")

    def test_uninitialized_variable_in_block(self):
        result = self._analyze_code("{ let a; print a; }")

        self.assertEqual([e.code for e in result.errors], ["S015"])
        self.assertIn("'a'", result.errors[0].message)

    def test_assignment_initializes(self):
        self._assert_ok("let a; a = 1; print a;")

    def test_assignment_to_undefined_variable(self):
        self.assertEqual(self._codes("b = 1;"), ["S010"])

    def test_assignment_value_checked_first(self):
        self.assertEqual(self._codes("let a; a = a;"), ["S015"])

    def test_shadowing_in_nested_block(self):
        self._assert_ok("let a = 1; { let a = 2; print a; } print a;")

    def test_redeclaration_in_same_scope(self):
        result = self._analyze_code("let a = 1; let a = 2;")

        self.assertEqual([e.code for e in result.errors], ["S011"])
        self.assertEqual(result.errors[0].column, 16)

    def test_redeclaration_in_block(self):
        self.assertEqual(self._codes("{ let a = 1; let a = 2; }"), ["S011"])

    def test_initializer_sees_outer_binding(self):
        self._assert_ok("let a = 1; { let a = a + 1; print a; }")

    def test_initializer_cannot_see_own_name(self):
        self.assertEqual(self._codes("let a = a;"), ["S010"])

    def test_block_scope_ends(self):
        self.assertEqual(self._codes("{ let a = 1; } print a;"), ["S010"])

    def test_use_before_declaration(self):
        self.assertEqual(self._codes("print a; let a = 1;"), ["S010"])

    def test_function_definition_and_call(self):
        result = self._assert_ok("""
        fn add(a, b) {
            return a + b;
        }

        let result = add(5, 10);
        print result;
        """)

        add = result.symbol_table.global_scope.lookup_symbol_local("add")
        self.assertEqual(add.kind, SymbolKind.FUNCTION)
        self.assertTrue(add.is_initialized)

    def test_recursive_function(self):
        self._assert_ok("fn fact(n) { if (n <= 1) return 1; return n * fact(n - 1); }")

    def test_parameters_are_local(self):
        self.assertEqual(self._codes("fn f(a) { print a; } print a;"), ["S010"])

    def test_parameter_redeclared_in_body(self):
        self.assertEqual(self._codes("fn f(a) { let a = 1; }"), ["S011"])

    def test_parameter_shadowed_in_nested_block(self):
        self._assert_ok("fn f(a) { { let a = 1; print a; } }")

    def test_duplicate_parameters(self):
        self.assertEqual(self._codes("fn f(a, a) {}"), ["S011"])

    def test_function_redeclared(self):
        self.assertEqual(self._codes("fn f() {} fn f() {}"), ["S011"])

    def test_function_sees_globals_declared_before_it(self):
        self._assert_ok("let g = 1; fn f() { return g; }")

    def test_call_target_not_validated(self):
        self._assert_ok("let x = 1; x(); x(1, 2, 3);")

    def test_call_arguments_checked(self):
        self.assertEqual(self._codes("fn f(a) {} f(missing);"), ["S010"])

    def test_every_expression_kind_is_visited(self):
        self.assertEqual(self._codes("print -(!a);"), ["S010"])
        self.assertEqual(self._codes("print true and b;"), ["S010"])
        self.assertEqual(self._codes("print 1 < c;"), ["S010"])

    def test_literals_are_valid(self):
        self._assert_ok('print 1; print "s"; print nil; print true;')

    def test_for_loop_variable_is_scoped_to_loop(self):
        self._assert_ok("for (let i = 0; i < 3; i = i + 1) print i;")
        self.assertEqual(self._codes("for (let i = 0; i < 3; i = i + 1) {} print i;"), ["S010"])

    def test_conditions_checked(self):
        self.assertEqual(self._codes("if (x) print 1;"), ["S010"])
        self.assertEqual(self._codes("while (y) {}"), ["S010"])

    def test_analyze_can_be_called_again(self):
        analyzer = SemanticAnalyzer()
        statements = Parser(Lexer("let a = 1;").tokenize()).parse().statements

        self.assertFalse(analyzer.analyze(statements).has_errors())
        self.assertFalse(analyzer.analyze(statements).has_errors())


class TestControlFlowContext(AnalyzerTestCase):
    """break, continue and return placement."""

    def test_break_inside_loop(self):
        self._assert_ok("while (true) { break; }")
        self._assert_ok("for (;;) { if (true) continue; }")

    def test_break_outside_loop(self):
        result = self._analyze_code("break;")

        self.assertEqual([e.code for e in result.errors], ["S062"])
        self.assertIn("'break'", result.errors[0].message)

    def test_continue_outside_loop(self):
        self.assertEqual(self._codes("{ continue; }"), ["S062"])

    def test_function_body_resets_loop_context(self):
        self.assertEqual(self._codes("while (true) { fn f() { break; } }"), ["S062"])

    def test_loop_inside_function(self):
        self._assert_ok("fn f() { while (true) { break; } return; }")

    def test_return_outside_function(self):
        result = self._analyze_code("return 1;")

        self.assertEqual([e.code for e in result.errors], ["S064"])

    def test_return_in_nested_block_of_function(self):
        self._assert_ok("fn f() { { if (true) { return nil; } } }")


class TestErrorPolicy(AnalyzerTestCase):
    """Default stops at the first error; recovery collects all of them."""

    SOURCE = "print a; { print b; let c; print c; } let d = 1; let d = 2; break;"

    def test_default_stops_at_first_error(self):
        self.assertEqual(self._codes(self.SOURCE), ["S010"])

    def test_recovery_collects_all_errors(self):
        self.assertEqual(
            self._codes(self.SOURCE, recover=True),
            ["S010", "S010", "S015", "S011", "S062"],
        )

    def test_scopes_are_popped_after_errors(self):
        result = self._analyze_code("{ let a = 1; print b; } let a = 2; print a;", recover=True)

        self.assertEqual([e.code for e in result.errors], ["S010"])
        self.assertIs(result.symbol_table.current_scope, result.symbol_table.global_scope)

    def test_scopes_are_popped_when_stopping(self):
        result = self._analyze_code("fn f() { { print b; } }")

        self.assertEqual(len(result.errors), 1)
        self.assertIs(result.symbol_table.current_scope, result.symbol_table.global_scope)

    def test_errors_carry_file_locations(self):
        result = self._analyze_code("\n\n   print zz;")

        location = result.errors[0].location
        self.assertEqual((location.filename, location.line, location.column), ("test.cpl", 3, 10))

    def test_failed_initializer_still_binds_the_name(self):
        self.assertEqual(self._codes("let x = y; print x; x = 2;", recover=True), ["S010"])

    def test_failed_initializer_of_existing_name_reports_once(self):
        self.assertEqual(self._codes("let x = 1; let x = y;", recover=True), ["S010"])

    def test_error_codes_are_catalogued(self):
        sources = [
            "print a;", "let a; let a;", "{ let a; print a; }", "break;", "return;",
        ]
        codes = {code for source in sources for code in self._codes(source)}

        self.assertEqual(codes | {"S070"}, set(SEMANTIC_ERROR_CODES))


class TestDeepPrograms(AnalyzerTestCase):
    """Trees too deep for the interpreter stack become S070 diagnostics."""

    def _deep_print(self, depth: int) -> PrintStatement:
        expr = Literal.number(1)
        for _ in range(depth):
            expr = Grouping(expr)
        return PrintStatement(expr)

    def _unknown(self, name: str) -> PrintStatement:
        location = SourceLocation("test.cpl", 2, 7, 20)
        return PrintStatement(Identifier(Token(TokenType.IDENTIFIER, name, None, location)))

    def test_deep_tree_is_reported(self):
        options = CompilerOptions(filename="test.cpl")
        result = SemanticAnalyzer(options).analyze([self._deep_print(5000), self._unknown("x")])

        self.assertEqual([e.code for e in result.errors], ["S070"])
        self.assertEqual(result.errors[0].location.filename, "test.cpl")
        self.assertIs(result.symbol_table.current_scope, result.symbol_table.global_scope)

    def test_recovery_continues_after_deep_tree(self):
        options = CompilerOptions(filename="test.cpl", recover=True)
        result = SemanticAnalyzer(options).analyze([self._deep_print(5000), self._unknown("x")])

        self.assertEqual([e.code for e in result.errors], ["S070", "S010"])

    def test_deepest_parsable_program_is_analyzed(self):
        self._assert_ok("{" * 20 + "let a = " + "(" * 30 + "1" + ")" * 30 + "; print a;" + "}" * 20)


class TestSymbolTable(unittest.TestCase):

    def setUp(self):
        self.table = SymbolTable()
        self.location = SourceLocation("test.cpl", 1, 1, 0)

    def test_lookup_walks_outwards(self):
        self.table.define_variable("a", self.location, True)
        self.table.enter_scope(ScopeKind.BLOCK, "block")

        self.assertIsNotNone(self.table.lookup_symbol("a"))
        self.assertIsNone(self.table.current_scope.lookup_symbol_local("a"))
        self.assertEqual(self.table.depth, 2)

    def test_inner_binding_shadows_outer(self):
        self.table.define_variable("a", self.location, True)
        self.table.enter_scope(ScopeKind.BLOCK, "block")
        inner = self.table.define_variable("a", self.location, False)

        self.assertIs(self.table.lookup_symbol("a"), inner)
        self.assertEqual(len(self.table.visible_symbols()), 1)

        self.table.exit_scope()
        self.assertTrue(self.table.lookup_symbol("a").is_initialized)

    def test_redefinition_raises(self):
        self.table.define_variable("a", self.location, True)

        with self.assertRaises(SemanticError) as ctx:
            self.table.define_function("a", self.location)
        self.assertEqual(ctx.exception.diagnostic.code, "S011")

    def test_global_scope_is_never_popped(self):
        self.assertIsNone(self.table.exit_scope())
        self.assertIs(self.table.current_scope, self.table.global_scope)


if __name__ == '__main__':
    unittest.main()
