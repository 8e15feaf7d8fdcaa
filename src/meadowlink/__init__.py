"""


Device Sessions

- Conduit: abstraction of a bi-directional channel. Combines 2 streams for reading and writing.
  SerialConduit opens the device's serial port with fixed framing.
- MessageDecoder: reads the conduit and classifies each message by kind (Data, AppOutput,
  FileList, DeviceInfo...). The decoder is the only part that knows the wire format.
- MessageListener: a background thread that decodes messages and fires each one on the session's
  message source, an EventSource. Every subscriber sees every message.
- ResponseCorrelator: pairs a command with its reply. Replies carry no request id, so a predicate
  over the message is registered before the command is sent; the first registration whose
  predicate matches claims the message. Registrations are removed on resolution, timeout or
  failure, so a late reply cannot be claimed by a request that has given up.
- CommandDispatcher: encodes and writes commands. Never waits.
- FileInventoryCache: the last file list read from the device, replaced as a whole on refresh.
- DeviceSession: owns all of the above for one device and provides the operations: write a file,
  list files, read device info, deploy the required libraries, deploy the application.


## Results

Operations that wait for a reply return a Result:
  Ok(value)          the reply arrived
  TimedOut(value)    nothing matching arrived in time
  Failed(reason, value)   the request could not be sent, or the session closed while waiting
The value of TimedOut/Failed is what a caller would use in place of the reply (False, '',
the previously known file list).

Timed-out requests are not re-sent unless a BoundedRetry strategy is given to the session or
`retries` is configured.


## Threading

Commands are sent on the caller's thread. Replies are read on the listener thread and handed
to the waiting caller through a Future. Two callers waiting for the same kind of message at the
same time race: whichever registered first gets the first reply. Serialize file writes if that
matters.

"""
