# kclasync

An asyncio framework for writing record processors that speak the
Kinesis Client Library (KCL) MultiLang Daemon protocol. The daemon starts
your program and exchanges one JSON message per line over standard input
and output; `kclasync` decodes those messages, hands them to your
processor and sends each acknowledgement back.

No third-party runtime dependencies are needed.

## Writing a processor

Subclass `kclasync.processor.Processor` and implement its six coroutines.
Then pass an instance to `kclasync.runner.run` along with a transport:

```python
import asyncio

from kclasync.processor import Processor
from kclasync.runner import run
from kclasync.transport import StdTransport


class PrintingProcessor(Processor):
    async def initialize(self, msg):
        self.shard_id = msg.shard_id

    async def process_records(self, msg, checkpointer):
        for record in msg.records:
            payload = record.to_bytes()
            print(payload)
        await checkpointer.checkpoint(None, None)

    async def shutdown(self, msg, checkpointer):
        await checkpointer.checkpoint(None, None)

    async def shutdown_requested(self, msg, checkpointer):
        await checkpointer.checkpoint(None, None)

    async def lease_lost(self, msg):
        pass

    async def shard_ended(self, msg):
        pass


asyncio.run(run(StdTransport(), PrintingProcessor()))
```

`run` never returns normally: it loops until something raises. After
every handled message it writes a `status` reply whose `responseFor` names
the action it handled. Errors raised by your processor or the transport
stop the loop and propagate out of `run`; with `StdTransport`, the end of
standard input raises `EOFError`. A `checkpoint` reply arriving outside a
checkpoint request raises `kclasync.runner.UnexpectedMessageError`.

### Checkpointing

`Checkpointer.checkpoint(sequence_number, sub_sequence_number)` sends a
checkpoint request and waits for the daemon's reply. Pass `None` for both
to checkpoint at the latest record delivered. When the daemon reports an
error the call raises `kclasync.checkpoint.CheckpointFailed` (its
`reason` holds the daemon's text); any reply other than a checkpoint
raises `kclasync.checkpoint.InvalidCheckpointState` (its `message` holds
the reply). Both derive from `kclasync.checkpoint.CheckpointError`.

### Messages

`kclasync.messages` defines one dataclass per message received from the
daemon (`InitializeMessage`, `ProcessRecordsMessage`, `ShutdownMessage`,
`ShutdownRequestedMessage`, `LeaseLostMessage`, `ShardEndedMessage`,
`CheckpointMessage`), the `Record` carried in a batch, and the messages
sent back (`CheckpointRequest`, `StatusMessage`). Each has `to_dict()`;
received messages also have `from_dict()` and an `id` naming their action.

- `parse_message(line)` decodes one JSON line and raises
  `MessageError` (a `ValueError`) for invalid JSON, an unknown action or
  a missing or mistyped field.
- `encode_message(message)` renders an outgoing message as compact JSON.
- `Record.to_bytes()` returns the base64-decoded payload and raises
  `binascii.Error` for malformed base64.

### Transports

`kclasync.transport.Transport` is the abstract channel with
`read_message`, `write_message` and `write_error`. `StdTransport` reads
from standard input and writes to standard output, with `write_error`
going to standard error; `stdin`, `stdout`, `stderr` and `failures_dir`
can be passed in, which is handy in tests. A line that cannot be decoded
is saved, together with the error, to a file named after the current time
in milliseconds in `failures_dir` (default `failures`) before the
`MessageError` is raised.

## Example consumer

`kclasync.example.ExampleProcessor` decodes each record, checkpoints after
every batch, and raises `RuntimeError` on shutdown, shutdown request,
lost lease or shard end. Run it over standard input and output with:

```
kclasync-example
```

It logs any failure to standard error and exits with status 1.

## Bootstrapping the daemon

The MultiLang Daemon is a Java program. `kcl-bootstrap` reads the
dependencies listed in a Maven `pom.xml` (resolving `${property}`
versions from `<properties>` and ignoring `<exclusions>`), downloads the
missing JARs from Maven Central into a folder, finds `java` and prints
the command line that starts the daemon:

```
kcl-bootstrap --properties app.properties
```

Options:

| Option | Meaning |
| --- | --- |
| `-p`, `--properties` | KCL properties file (required) |
| `-j`, `--java` | path to the `java` executable; searched on `PATH` otherwise |
| `--jar-folder` | where JARs are stored (default `jars`) |
| `--pom` | POM file listing the dependencies (default `pom.xml`) |
| `-l`, `--log-configuration` | logback configuration passed to the daemon |
| `-e`, `--execute` | run the daemon instead of printing the command |

The classpath is every `.jar` in the folder, sorted, followed by the
current directory. Progress messages go to standard error, so the printed
command can be captured directly, for example with
`$(kcl-bootstrap -p app.properties)`. A failed download or a missing
`java` prints an error and exits with status 1.

The same steps are available from Python in `kclasync.bootstrap`:
`maven.MavenPackage` (`file_name()`, `url()`, `fetch(folder)`),
`pom.parse_pom(path)`, and `cli.fetch_jars`, `cli.find_java` and
`cli.build_command`.

## Limitations

- `kcl-bootstrap` fetches only the dependencies written in the POM; it
  does not resolve their transitive dependencies, so the POM has to list
  every JAR the daemon needs.
- `parse_pom` stops quietly at the first malformed part of the document
  and returns what it found up to there.