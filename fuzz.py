#!/usr/bin/env python3
"""
Random fuzzer for the template compiler.
Generates malformed templates and checks that compilation either succeeds
or fails with a TemplateError, never with any other exception.
"""

import argparse
import random
import string
import sys
import time
import traceback

from expohtml import TemplateError, compile_text

TAGS = [
    "div", "span", "p", "a", "img", "ul", "li", "table", "tr", "td", "br", "hr",
    "input", "head", "body", "html", "title", "meta", "link", "script", "style",
    "block", "load", "unload",
]

ATTRIBUTES = ["id", "class", "href", "src", "alt", "cond", "loop", "target", "index", "media", "type"]

SPECIAL_CHARS = ["<", ">", "/", "'", '"', "=", "{", "}", "@", "$", "|", ":", "`", "\\", "\x00", "\n"]

VARIABLES = ["name", "$name", "user->name", "items[0]", "$row['id']", "", "1bad", "a b", "$_GET['x']"]

FILTERS = [
    "upper", "lower", "trim", "strip", "escape", "noescape", "escapejs", "json", "urlencode",
    "nl2br", "join", "join:'-'", "date", "date:'Y'", "number_format:2", "number_shorten",
    "number_shorten:1", "link", "link:$label", "unknown", "", ":",
]

CODE_FRAGMENTS = [
    "echo $x;", "$a = 1;", "if ($x) { echo 1; }", "exec('ls');", "'exec(1)' == $x",
    "// comment", "/* block */", "`ls`", "$_POST['a']", "include 'x.php';", "", "{@ nested }",
]

LOOP_EXPRESSIONS = ["$items as $item", "items=>$v", "items=>$k,$v", "$i=0;$i<3;$i++", "", "=>", " as "]


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def fuzz_attribute():
    name = random.choice(ATTRIBUTES + [random_string(1, 8), random.choice(SPECIAL_CHARS)])
    if name == "loop":
        value = random.choice(LOOP_EXPRESSIONS)
    elif name == "target":
        value = random.choice(["app.css", "app.js", "app.txt", "x.js?v=1", "", "noext"])
    else:
        value = random.choice([random_string(), "$show", "", random.choice(SPECIAL_CHARS)])
    quote_styles = [('="', '"'), ("='", "'"), ("=", ""), ("", ""), ('="', ""), ("==", "")]
    quote_start, quote_end = random.choice(quote_styles)
    if not quote_start:
        return name
    return f"{name}{quote_start}{value}{quote_end}"


def fuzz_open_tag():
    tag = random.choice(TAGS + [random_string(1, 6), ""])
    attrs = " ".join(fuzz_attribute() for _ in range(random.randint(0, 4)))
    closing = random.choice([">", "/>", " >", "", ">>"])
    return f"<{tag} {attrs}{closing}"


def fuzz_close_tag():
    tag = random.choice(TAGS + [random_string(1, 6)])
    return random.choice([f"</{tag}>", f"</ {tag}>", f"</{tag}", f"<//{tag}>"])


def fuzz_comment():
    content = random.choice([random_string(0, 30), "// note", "a // b", ""])
    return random.choice([f"<!--{content}-->", f"<!--{content}", f"<!-{content}-->", "<!---->"])


def fuzz_interpolation():
    chain = "|".join(random.choice(FILTERS) for _ in range(random.randint(0, 4)))
    var = random.choice(VARIABLES)
    body = f"{var}|{chain}" if chain else var
    return random.choice([f"{{${body}}}", f"{{${body}", f"{{ ${body} }}"])


def fuzz_raw_block():
    code = random.choice(CODE_FRAGMENTS)
    return random.choice([f"{{@ {code} }}", f"{{@{code}", f"{{@ {{@ {code} }} }}", "{@}"])


def fuzz_text():
    return random.choice([random_string(0, 40), " ", "\n", random.choice(SPECIAL_CHARS) * random.randint(1, 4)])


def fuzz_nested_structure(depth=0, max_depth=6):
    if depth >= max_depth or random.random() < 0.3:
        return fuzz_text()
    tag = random.choice(TAGS)
    children = "".join(fuzz_nested_structure(depth + 1, max_depth) for _ in range(random.randint(0, 3)))
    return f"<{tag} {fuzz_attribute()}>{children}</{tag}>"


def generate_fuzzed_template():
    """Generate a complete fuzzed template."""
    parts = []
    if random.random() < 0.5:
        parts.append("<html><head><title>t</title></head><body>")
    for _ in range(random.randint(1, 20)):
        element_type = random.choices(
            [
                fuzz_open_tag,
                fuzz_close_tag,
                fuzz_comment,
                fuzz_interpolation,
                fuzz_raw_block,
                fuzz_text,
                fuzz_nested_structure,
            ],
            weights=[20, 10, 5, 15, 8, 15, 8],
        )[0]
        parts.append(element_type())
    if random.random() < 0.5:
        parts.append("</body></html>")
    return "".join(parts)


def run_fuzzer(num_tests, seed=None, verbose=False, strict=False):
    """Run the fuzzer against the compiler."""
    if seed is not None:
        random.seed(seed)

    crashes = []
    hangs = []
    compiled = 0
    rejected = 0

    print(f"Fuzzing expohtml with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        source = generate_fuzzed_template()

        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")

        start = time.perf_counter()
        try:
            compile_text(source, strict=strict)
            compiled += 1
        except TemplateError:
            rejected += 1
        except Exception as e:
            crashes.append({
                "test_num": i,
                "source": source,
                "error": f"{type(e).__name__}: {e}",
                "traceback": traceback.format_exc(),
            })
            if verbose:
                print(f"  CRASH: Test {i}: {e}")
        elapsed = time.perf_counter() - start
        if elapsed > 5.0:
            hangs.append({"test_num": i, "source": source, "time": elapsed})

    elapsed_total = time.time() - start_time

    print(f"\n{'='*60}")
    print("FUZZING RESULTS: expohtml")
    print(f"{'='*60}")
    print(f"Total tests:    {num_tests}")
    print(f"Compiled:       {compiled}")
    print(f"Rejected:       {rejected}")
    print(f"Crashes:        {len(crashes)}")
    print(f"Hangs (>5s):    {len(hangs)}")
    print(f"Total time:     {elapsed_total:.2f}s")

    for crash in crashes[:10]:
        print(f"\nTest #{crash['test_num']}:")
        print(f"  Template: {crash['source'][:200]!r}...")
        print(f"  Error: {crash['error']}")
    for hang in hangs[:5]:
        print(f"\nTest #{hang['test_num']} ({hang['time']:.2f}s):")
        print(f"  Template: {hang['source'][:200]!r}...")

    return not crashes and not hangs


def main():
    parser = argparse.ArgumentParser(description="Fuzz the template compiler with malformed input")
    parser.add_argument("--num-tests", "-n", type=int, default=1000, help="Number of test cases (default: 1000)")
    parser.add_argument("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--strict", action="store_true", help="Compile in strict mode")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--sample", type=int, metavar="N", help="Just print N sample templates (no compiling)")

    args = parser.parse_args()

    if args.sample:
        if args.seed is not None:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i+1} ===")
            print(generate_fuzzed_template())
            print()
        return

    success = run_fuzzer(args.num_tests, seed=args.seed, verbose=args.verbose, strict=args.strict)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
