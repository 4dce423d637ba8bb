# ccsds_rs/model/dual_basis.py
# conversion between the conventional (polynomial) basis and the Berlekamp
# dual basis used on CCSDS links
# both directions are byte permutations, exact inverses of each other:
#   to_dual_basis(to_conventional(x)) == x
#
# the codec applies these as a pre/post step around the core algorithm,
# never inside it

from ccsds_rs.model.gf_tables import GFTables, TABLES


def to_conventional(data: bytes, tables: GFTables = TABLES) -> bytes:
    # dual basis -> conventional, returns a new bytes object
    return bytes(data).translate(tables.tal_to_conventional)


def to_dual_basis(data: bytes, tables: GFTables = TABLES) -> bytes:
    # conventional -> dual basis, returns a new bytes object
    return bytes(data).translate(tables.tal_to_dual_basis)


if __name__ == "__main__":
    everything = bytes(range(256))
    assert to_dual_basis(to_conventional(everything)) == everything
    assert to_conventional(to_dual_basis(everything)) == everything
    print("dual_basis.py: self-test OK")
