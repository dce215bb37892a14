from reactfn import GAP, get_global_graph, state, wrap

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Wrapping functions and binding state")
print("-" * 100)
print()

# State cells are the sources of the graph. Setting one marks everything downstream stale.
b = state(2)
c = state(1)

# Bind the cells to the parameters of a plain function.
a = wrap(lambda x, y: x + y).bind_to(b, c)

print(f"a() = {a()}")  # 3
b(5)
print(f"after b(5): a() = {a()}")  # 6
c(10)
print(f"after c(10): a() = {a()}")  # 15

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Literals and gaps")
print("-" * 100)
print()


def describe(name, age, city):
    return f"{name}, {age}, lives in {city}"


# Literals are captured at bind time, GAP leaves a parameter open for the caller.
age = state(30)
profile = wrap(describe).bind_to("Alice", age, GAP)

print(profile("Paris"))
age(31)
print(profile("Lisbon"))

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Only what changed is recomputed")
print("-" * 100)
print()

graph = get_global_graph()

price = state(10.0)
quantity = state(3)
tax_rate = state(0.2)

subtotal = wrap(lambda p, q: p * q).bind_to(price, quantity)
tax = wrap(lambda s, r: s * r).bind_to(subtotal, tax_rate)
total = wrap(lambda s, t: s + t).bind_to(subtotal, tax)

print(f"total = {total()}")
graph.reset_stats()

tax_rate(0.1)
print(f"total = {total()} ({graph.recomputations} recomputations after tax_rate changed)")

graph.reset_stats()
quantity(4)
print(f"total = {total()} ({graph.recomputations} recomputations after quantity changed)")
