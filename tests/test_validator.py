from __future__ import annotations

import unittest

from expohtml import SecurityError, is_safe, validate
from expohtml.validator import strip_comments_and_strings


class TestStripCommentsAndStrings(unittest.TestCase):
    def test_strings_are_emptied(self) -> None:
        assert strip_comments_and_strings("\"exec(1)\" == 'x'") == "\"\" == ''"

    def test_comments_are_removed(self) -> None:
        assert strip_comments_and_strings("a; // exec(1)\nb; /* system() */ c;") == "a; \nb;  c;"

    def test_comment_markers_inside_strings_are_data(self) -> None:
        assert strip_comments_and_strings('$u = "http://x.com"; exec(1);') == '$u = ""; exec(1);'

    def test_keep_double_quoted(self) -> None:
        code = "\"a $b\" . 'c'"
        assert strip_comments_and_strings(code, keep_double_quoted=True) == "\"a $b\" . ''"


class TestValidate(unittest.TestCase):
    def test_plain_code_passes(self) -> None:
        validate("$total = count($items); echo $total;")
        validate("$show && $user->isAdmin()")

    def test_dangerous_call_is_rejected(self) -> None:
        with self.assertRaises(SecurityError) as ctx:
            validate("exec(1) == $x")
        assert str(ctx.exception) == "Dangerous function 'exec' is not allowed in template"
        assert ctx.exception.code == "security-error"
        assert ctx.exception.fragment == "exec(1) == $x"

    def test_name_inside_string_is_data(self) -> None:
        validate('"exec(1)" == $x')
        validate("'system()' === $cmd")

    def test_name_inside_comment_is_ignored(self) -> None:
        validate("$a = 1; // eval($a)")
        validate("/* shell_exec('ls') */ $a = 1;")

    def test_call_detection_is_case_insensitive_and_allows_spaces(self) -> None:
        with self.assertRaises(SecurityError):
            validate("EVAL ($code)")

    def test_longest_name_is_reported(self) -> None:
        with self.assertRaises(SecurityError) as ctx:
            validate("shell_exec('ls')")
        assert "'shell_exec'" in ctx.exception.message

    def test_identifier_containing_name_passes(self) -> None:
        validate("$executor->run()")
        validate("my_system_info()")

    def test_filesystem_functions_are_rejected(self) -> None:
        for code in ("file_get_contents('/etc/passwd')", "unlink($f)", "fopen($f, 'w')"):
            with self.assertRaises(SecurityError):
                validate(code)

    def test_include_without_parentheses(self) -> None:
        with self.assertRaises(SecurityError) as ctx:
            validate("include 'other.php';")
        assert "'include'" in ctx.exception.message
        with self.assertRaises(SecurityError) as ctx:
            validate("require_once $path;")
        assert "'require_once'" in ctx.exception.message

    def test_include_as_plain_identifier_passes(self) -> None:
        validate("$include = true;")
        validate("$options->include = 1;")

    def test_superglobals_are_rejected(self) -> None:
        for code in ("$_GET['id']", "$_POST", "echo $_SESSION['user'];", "$GLOBALS['x']"):
            with self.assertRaises(SecurityError):
                validate(code)

    def test_superglobal_interpolated_in_double_quotes(self) -> None:
        with self.assertRaises(SecurityError):
            validate('echo "id: $_GET[id]";')

    def test_superglobal_name_in_single_quotes_passes(self) -> None:
        validate("echo '$_GET';")

    def test_backticks_are_rejected(self) -> None:
        with self.assertRaises(SecurityError) as ctx:
            validate("$out = `ls -la`;")
        assert "backticks" in ctx.exception.message

    def test_backtick_inside_string_passes(self) -> None:
        validate("$md = '`code`';")

    def test_is_safe(self) -> None:
        assert is_safe("$a + 1") is True
        assert is_safe("system('id')") is False


if __name__ == "__main__":
    unittest.main()
