"""Virtual memory paging simulator with LRU, NRU and second-chance replacement."""

from __future__ import annotations

import re
import sys
import time
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

MIN_PAGE_KB = 8
MAX_PAGE_KB = 32
MIN_MEMORY_KB = 126
MAX_MEMORY_KB = 16384
MAX_DEBUG = 3
REFERENCE_WINDOW = 20
ADDRESS_MASK = 0xFFFFFFFF

_BAD_ALGORITHM = "Algoritmo de substituicao invalido (LRU/NRU/SEG)."
_BAD_PAGE = "Tamanho de pagina nao suportado. Apenas 8-32 KB"
_BAD_MEMORY = "Tamanho de memoria fisica invalido. Apenas 128-16384KB (16MB)"
_BAD_DEBUG = "Nivel detalhamento modo debug invalido. Apenas 1-3"


class SimulationError(Exception):
    """Raised for invalid simulator settings or malformed traces."""


class Algorithm(str, Enum):
    """Page replacement algorithms."""

    LRU = "LRU"
    NRU = "NRU"
    SEG = "SEG"


@dataclass
class Page:
    """Page table entry for one virtual page."""

    referenced: bool = False
    modified: bool = False
    present: bool = False
    frame: int = 0
    last_access: int = -1

    @property
    def category(self) -> int:
        """NRU class, 1 (not referenced, clean) to 4 (referenced, dirty)."""
        if not self.referenced:
            return 2 if self.modified else 1
        return 4 if self.modified else 3

    def evict(self) -> bool:
        """Drop the page from memory; return True if it had to be written back."""
        dirty = self.modified
        self.present = False
        self.referenced = False
        self.modified = False
        self.frame = 0
        self.last_access = 0
        return dirty


def page_shift(page_size_kb: int) -> int:
    """Number of address bits used for the offset inside a page."""
    size = page_size_kb * 1024
    return size.bit_length() - 1 if size > 1 else 0


def parse_trace(lines: Iterable[str]) -> Iterator[tuple[int, str]]:
    """Yield (address, mode) pairs from lines of the form 'hexaddr R|W'."""
    for lineno, line in enumerate(lines, 1):
        fields = line.split()
        if not fields:
            continue
        if len(fields) < 2:
            raise SimulationError(f"Linha {lineno} invalida: {line.strip()!r}")
        try:
            address = int(fields[0], 16)
        except ValueError:
            raise SimulationError(
                f"Linha {lineno} invalida: {line.strip()!r}"
            ) from None
        yield address & ADDRESS_MASK, fields[1][0]


class Simulator:
    """Simulates page faults and write-backs for a stream of memory accesses."""

    def __init__(self, algorithm, page_size_kb, memory_kb, debug=0):
        try:
            self.algorithm = Algorithm(algorithm)
        except ValueError:
            raise SimulationError(_BAD_ALGORITHM) from None
        if not MIN_PAGE_KB <= page_size_kb <= MAX_PAGE_KB:
            raise SimulationError(_BAD_PAGE)
        if not MIN_MEMORY_KB <= memory_kb <= MAX_MEMORY_KB:
            raise SimulationError(_BAD_MEMORY)
        if not 0 <= debug <= MAX_DEBUG:
            raise SimulationError(_BAD_DEBUG)
        self.page_size_kb = page_size_kb
        self.memory_kb = memory_kb
        self.debug = debug
        self.frame_count = memory_kb // page_size_kb
        self.shift = page_shift(page_size_kb)
        self.page_faults = 0
        self.pages_written = 0
        self.timer = 0
        self._pages: dict[int, Page] = {}
        self._frames: list[int] = []
        self._hand = 0

    def _resident(self, frame: int) -> Page:
        return self._pages[self._frames[frame]]

    def _resident_pages(self) -> Iterator[Page]:
        return (self._pages[number] for number in self._frames)

    def _is_stale(self, page: Page) -> bool:
        return page.last_access < self.timer - REFERENCE_WINDOW

    def _lru_victim(self) -> int:
        return min(range(self.frame_count), key=lambda i: self._resident(i).last_access)

    def _nru_victim(self) -> int:
        victim, best = 0, 5
        for index, page in enumerate(self._resident_pages()):
            if self._is_stale(page):
                page.referenced = False
            category = page.category
            if category < best:
                victim, best = index, category
                if best == 1:
                    break
        return victim

    def _seg_victim(self) -> int:
        count = self.frame_count
        start = self._hand
        victim = 0
        for offset in range(count):
            slot = (start + offset) % count
            page = self._resident(slot)
            if self._is_stale(page):
                page.referenced = False
            self._hand += 1
            if page.referenced:
                page.referenced = False
            else:
                victim = slot
                break
        if self._hand == count:
            self._hand = 0
        return victim

    def _replace(self) -> int:
        choose = {
            Algorithm.LRU: self._lru_victim,
            Algorithm.NRU: self._nru_victim,
            Algorithm.SEG: self._seg_victim,
        }[self.algorithm]
        victim = choose()
        if self._resident(victim).evict():
            self.pages_written += 1
        return victim

    def _print_frames(self) -> None:
        cells = []
        for frame in range(self.frame_count):
            if frame < len(self._frames):
                page = self._resident(frame)
                cell = (
                    f"Quadro {frame}: {self._frames[frame]} "
                    f"R:{int(page.referenced)} M:{int(page.modified)} "
                )
                if self.debug >= 2:
                    cell += f"Time ultimo Acesso:{page.last_access} /"
                else:
                    cell += "/"
            else:
                cell = "X /"
            cells.append(cell)
        print("".join(cells), end="\n\n")

    def access(self, address: int, mode: str) -> bool:
        """Process one access; return True if it caused a page fault."""
        number = (address & ADDRESS_MASK) >> self.shift
        page = self._pages.setdefault(number, Page())
        if self.debug:
            print(f"Tempo: {self.timer} Pagina {number} Acesso {mode}")

        fault = not page.present
        if page.present:
            if self.debug >= 2:
                print(f"Pagina presente em quadro: {page.frame}")
        else:
            self.page_faults += 1
            if len(self._frames) < self.frame_count:
                index = len(self._frames)
                if self.debug >= 2:
                    print(f"Quadro {index} vazio. Pagina movida")
                self._frames.append(number)
            else:
                index = self._replace()
                if self.debug >= 2:
                    print(
                        f"Sem moldura. Alg Subst removeu pagina: {index} "
                        "para dar espaco."
                    )
                self._frames[index] = number
            page.present = True
            page.frame = index

        page.referenced = True
        if mode == "W":
            page.modified = True
        page.last_access = self.timer

        if self.debug:
            self._print_frames()
            if self.debug > 2:
                time.sleep(2)

        self.timer += 1
        return fault

    def run(self, accesses: Iterable[tuple[int, str]]) -> int:
        """Process every access; return the total number of page faults."""
        for address, mode in accesses:
            self.access(address, mode)
        return self.page_faults

    def frame_table(self) -> list[int]:
        """Virtual page number held by each occupied frame."""
        return list(self._frames)

    def report(self, trace_path: str) -> str:
        """Summary of the simulation."""
        return "\n".join(
            [
                f"Arquivo de Entrada: {trace_path}",
                f"Tamanho da Memoria fisica: {self.memory_kb} KB",
                f"Tamanho das Paginas: {self.page_size_kb} KB",
                f"Algoritmo de Substituicao: {self.algorithm.value}",
                f"Numero de Faltas de Paginas: {self.page_faults}",
                f"Numero de Paginas Escritas: {self.pages_written}",
            ]
        )


def _leading_int(text: str, prefix: str = "") -> int:
    match = re.match(re.escape(prefix) + r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def main(argv=None) -> int:
    """Command line: ALGORITHM TRACE PAGE_KB MEMORY_KB [-DEBUG]."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        if not 4 <= len(args) <= 5:
            raise SimulationError("Argumentos Insuficientes.")
        algorithm_name, trace_path, page_arg, memory_arg, *rest = args
        try:
            algorithm = Algorithm(algorithm_name)
        except ValueError:
            raise SimulationError(_BAD_ALGORITHM) from None
        try:
            trace = open(trace_path, encoding="utf-8")
        except OSError:
            raise SimulationError("Erro ao abrir arquivo entrada.") from None
        with trace:
            debug = _leading_int(rest[0], "-") if rest else 0
            simulator = Simulator(
                algorithm, _leading_int(page_arg), _leading_int(memory_arg), debug
            )
            if rest:
                if debug < 1:
                    raise SimulationError(_BAD_DEBUG)
                print(f"Modo Debug Ativo Nivel Detalhamento {debug}.")
                print("Executando o Simulador...")
            simulator.run(parse_trace(trace))
    except SimulationError as exc:
        print(exc, file=sys.stderr)
        return 1
    print(simulator.report(trace_path))
    return 0


if __name__ == "__main__":
    sys.exit(main())