# Decimal number recognizer: digit+ ('.' digit+)?
#
# States (see README.md):
#   S start, N whole part, P decimal point, F fraction, E end, X error


def is_digit(src, dst, v):
    # first character is a digit
    return "0" <= v[0] <= "9"


def is_dot(src, dst, v):
    return v[0] == "."


def is_eol(src, dst, v):
    # no characters left
    return len(v) == 0


def enter(src, dst, v):
    # trace the transition and consume one character
    print(f"{src} -> {dst}: {v}")
    return v[1:]


def enter_end(src, dst, v):
    return "valid number"


def enter_error(src, dst, v):
    return "invalid number: " + v
