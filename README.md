# syslabs

Small operating-systems tools and demonstrations for POSIX systems:

- `syslabs.vmsim` – a virtual memory simulator that replays a trace of memory
  accesses and counts page faults and dirty-page write-backs under the LRU,
  NRU or SEG (second chance) replacement policy.
- `syslabs.lottery` and `syslabs.priority` – schedulers that start programs
  stopped and share the processor between them by lottery tickets or by
  fixed priority, resuming and pausing them with `SIGCONT` and `SIGSTOP`.
- `syslabs.workloads` – seven CPU- and I/O-bound workload programs.
- `syslabs.processes`, `syslabs.signals`, `syslabs.ipc`, `syslabs.sync` –
  demonstrations of fork and exec, shared memory, signals, pipes, FIFOs,
  locks and threads.

Python 3.10 or later is needed and there are no other dependencies. `fork`,
named pipes, `fcntl` locks and job-control signals are used throughout, so a
POSIX system is required.

## Installing

    pip install .

## Virtual memory simulator

Each line of a trace holds a hexadecimal address followed by `R` (read) or
`W` (write):

    0700ff10 R
    2f6965a0 W

    syslabs-vmsim ALGORITHM TRACE PAGE_KB MEMORY_KB [-LEVEL]
    syslabs-vmsim LRU simulador.log 16 128
    syslabs-vmsim NRU matriz.log 32 256 -1

`ALGORITHM` is `LRU`, `NRU` or `SEG`; the page size must be 8 to 32 KB and
the memory size 126 to 16384 KB. The optional `-1`, `-2` or `-3` prints every
access and the frame table, with more detail at higher levels; level 3 also
pauses two seconds after each access. NRU and SEG clear the referenced bit
of pages not accessed in the last 20 accesses. At the end the trace file,
memory size, page size, algorithm, page faults and pages written back are
printed. Bad arguments are reported on standard error with exit status 1.

From Python:

    from syslabs.vmsim import Simulator, parse_trace

    with open("simulador.log") as trace:
        sim = Simulator("LRU", 16, 128)
        sim.run(parse_trace(trace))
    print(sim.report("simulador.log"))
    print(sim.page_faults, sim.pages_written, sim.frame_table())

`Simulator.access(address, mode)` processes a single access and returns
whether it faulted. Invalid settings or trace lines raise `SimulationError`.

## Schedulers

Both schedulers read a job file in which every entry is `exec`, a program
name (`programa1` to `programa7`), a label and a number; the number may also
be written straight after the label:

    exec programa1 numtickets= 5
    exec programa3 numtickets=2

    exec programa1 prioridade= 2
    exec programa5 prioridade= 1

    syslabs-lottery  [EXEC_FILE [OUTPUT_FILE]]
    syslabs-priority [EXEC_FILE [OUTPUT_FILE]]

The files default to `exec.txt` and `saida.txt`. One new job is admitted every
three seconds.

- The lottery scheduler gives each job its number of tickets from a pool of
  20, draws a ticket for every one-second slice and runs its owner. A job
  finishing returns its tickets to the pool.
- The priority scheduler always runs the unfinished job with the lowest
  priority value (1 to 7; anything else is rejected) for a three-second
  slice.

Admissions, slices and completions are logged to the terminal and to the
output file. In Python, `LotteryScheduler` and `PriorityScheduler` take an
output stream, a launcher and the slice and arrival times, so they can run
any `Job`; `syslabs.jobs` provides `parse_jobs`, `spawn_stopped` and `Job`.

### What the schedulers do not provide

By default a job named `programaN` is started as the executable
`./programaN` in the working directory. The package does not install such
executables; supply them yourself, for example small scripts that run
`syslabs-workload N`.

## Workloads

    syslabs-workload N

runs workload `N` (1 to 7): two nested arithmetic loops (1, 2), folding the
numbers of `testeprog3.txt` (3), scaling `testeprog4.txt` into
`saidaprog4.txt` (4), writing a large fixed text to `saidaprog5.txt` (5), and
repeating the numbers of `testeprog6.txt` and `testeprog7.txt` into
`saidaprog6.txt` and `saidaprog7.txt` (6, 7). The functions `program1` to
`program7` take the loop sizes and file paths as arguments.

## Lab demonstrations

Each command takes a sub-command:

    syslabs-processes {pids|value|sort|echo|exec PROG [ARGS...]|shared|matrix|motd-write|motd-read|search}
    syslabs-signals   {alternate|limit DELAY COMMAND...|ctrl-c|sigkill|divide|phone|rotate P1 P2 P3|io LABEL}
    syslabs-ipc       {pipe|scale [IN OUT]|ls-cat|mkfifo [PATH]|write [PATH]|read [PATH]|two-writers [PATH]}
    syslabs-sync      {counters|shared|queue|letters [x]|sum STEP|buffers}

Among them: parent and child pids, a child's copy of a variable, sorting ten
numbers from standard input in a child, a shared counter, adding matrices
with one child per row, a message of the day kept in a named shared memory
segment, parallel search, two busy children stopped and resumed in turn, a
time limit on a command, a call-cost meter driven by `SIGUSR1`/`SIGUSR2`
(`phone`), a pipe from a child, `ls | cat`, FIFOs with one or two writers,
two counting threads, a producer and consumer around `BoundedQueue`, letters
and sums guarded by a file lock shared between processes, and a
16-character buffer handed from a producer thread to a consumer.

## Running the tests

    pip install ".[test]"
    pytest