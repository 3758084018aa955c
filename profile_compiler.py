#!/usr/bin/env python3
"""Profile the template compiler to find performance bottlenecks."""

import cProfile
import io
import pstats

from expohtml import compile_text

# Sample template
template = """
<!DOCTYPE html>
<html>
<head><title>{$title}</title>
<load target="app.css" index="2"/>
<load target="base.css" index="1"/>
</head>
<body>
    <div class="container" cond="$show">
        <p>{$name|upper|escape}</p>
        <ul>
            <li loop="$items as $item">{$item|trim}</li>
        </ul>
        {@ $total = count($items); }
        <p>{$total|number_shorten:1}</p>
    </div>
    <load target="app.js" type="body"/>
</body>
</html>
""" * 100  # Repeat for more meaningful results

# Profile
pr = cProfile.Profile()
pr.enable()

for _ in range(10):
    _ = compile_text(template)

pr.disable()

# Print stats
s = io.StringIO()
ps = pstats.Stats(pr, stream=s).sort_stats("cumulative")
ps.print_stats(50)  # Top 50 functions
print(s.getvalue())
